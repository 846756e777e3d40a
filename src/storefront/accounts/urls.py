"""Account URL patterns."""

from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    # Authentication
    path("auth/register", views.RegisterView.as_view(), name="register"),
    path("auth/login", views.LoginView.as_view(), name="login"),
    path("auth/logout", views.LogoutView.as_view(), name="logout"),
    path("auth/forgot-password", views.ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/reset-password", views.ResetPasswordView.as_view(), name="reset-password"),

    # Profile
    path("auth/me", views.ProfileView.as_view(), name="me"),
    path("auth/me/password", views.ChangePasswordView.as_view(), name="change-password"),

    # Back office
    path("admin/users", views.UserListView.as_view(), name="admin-user-list"),
    path("admin/users/<int:user_id>", views.UserDetailView.as_view(), name="admin-user-detail"),
    path("admin/users/<int:user_id>/role", views.UserRoleView.as_view(), name="admin-user-role"),
]
