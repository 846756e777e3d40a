"""Models for the OpenCart (``oc_*``) schema.

The tables belong to the OpenCart installation, so every model here is
unmanaged. OpenCart declares no foreign key constraints and uses ``0`` for
"none", which is why relations are declared with ``db_constraint=False``.
"""

from django.db import models

from .fields import OpenCartDateField


class OpenCartModel(models.Model):
    """Base class for tables owned by OpenCart."""

    class Meta:
        abstract = True
        managed = False


def _fk(to, column, related_name="+", **kwargs):
    return models.ForeignKey(
        to,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        db_column=column,
        related_name=related_name,
        **kwargs,
    )


# =============================================================================
# Customers
# =============================================================================


class Customer(OpenCartModel):
    customer_id = models.AutoField(primary_key=True)
    customer_group_id = models.IntegerField(default=1)
    store_id = models.IntegerField(default=0)
    language_id = models.IntegerField(default=1)
    firstname = models.CharField(max_length=32)
    lastname = models.CharField(max_length=32)
    email = models.CharField(max_length=96)
    telephone = models.CharField(max_length=32)
    fax = models.CharField(max_length=32, default="")
    password = models.CharField(max_length=255)
    salt = models.CharField(max_length=9, default="")
    cart = models.TextField(null=True, default="")
    wishlist = models.TextField(null=True, default="")
    newsletter = models.BooleanField(default=False)
    address_id = models.IntegerField(default=0)
    custom_field = models.TextField(default="[]")
    ip = models.CharField(max_length=40, default="")
    status = models.BooleanField(default=True)
    safe = models.BooleanField(default=False)
    token = models.TextField(default="")
    code = models.CharField(max_length=40, default="")
    verify_code = models.CharField(max_length=40, default="")
    status_code = models.IntegerField(default=0)
    delete_status = models.IntegerField(default=0)
    from_come = models.CharField(max_length=32, default="")
    is_marketer = models.BooleanField(default=False)
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer"

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        return f"{self.firstname} {self.lastname}".strip()


class CustomerGroup(OpenCartModel):
    customer_group_id = models.AutoField(primary_key=True)
    approval = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_group"


class CustomerGroupDescription(OpenCartModel):
    pk = models.CompositePrimaryKey("customer_group_id", "language_id")
    customer_group_id = models.IntegerField()
    language_id = models.IntegerField()
    name = models.CharField(max_length=32)
    description = models.TextField(default="")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_group_description"


class CustomerActivity(OpenCartModel):
    customer_activity_id = models.AutoField(primary_key=True)
    customer_id = models.IntegerField()
    key = models.CharField(max_length=64)
    data = models.TextField(default="")
    ip = models.CharField(max_length=40, default="")
    # Zero datetimes read back as None.
    date_added = models.DateTimeField(null=True)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_activity"


class CustomerSearch(OpenCartModel):
    customer_search_id = models.AutoField(primary_key=True)
    store_id = models.IntegerField(default=0)
    language_id = models.IntegerField(default=1)
    customer_id = models.IntegerField(default=0)
    keyword = models.CharField(max_length=255)
    category_id = models.IntegerField(null=True)
    sub_category = models.BooleanField(default=False)
    description = models.BooleanField(default=False)
    products = models.IntegerField(default=0)
    ip = models.CharField(max_length=40, default="")
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_search"


class CustomerOnline(OpenCartModel):
    ip = models.CharField(max_length=40, primary_key=True)
    customer_id = models.IntegerField(default=0)
    url = models.TextField(default="")
    referer = models.TextField(default="")
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_online"


class CustomerLogin(OpenCartModel):
    customer_login_id = models.AutoField(primary_key=True)
    email = models.CharField(max_length=96)
    ip = models.CharField(max_length=40, default="")
    total = models.IntegerField(default=0)
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_login"


class CustomerIp(OpenCartModel):
    customer_ip_id = models.AutoField(primary_key=True)
    customer_id = models.IntegerField()
    ip = models.CharField(max_length=40)
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_ip"


class CustomerWishlist(OpenCartModel):
    pk = models.CompositePrimaryKey("customer_id", "product_id")
    customer_id = models.IntegerField()
    product_id = models.IntegerField()
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_customer_wishlist"


class Country(OpenCartModel):
    country_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=128)
    iso_code_2 = models.CharField(max_length=2, default="")
    iso_code_3 = models.CharField(max_length=3, default="")
    status = models.BooleanField(default=True)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_country"


class Zone(OpenCartModel):
    zone_id = models.AutoField(primary_key=True)
    country_id = models.IntegerField()
    name = models.CharField(max_length=128)
    code = models.CharField(max_length=32, default="")
    status = models.BooleanField(default=True)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_zone"


class Address(OpenCartModel):
    address_id = models.AutoField(primary_key=True)
    customer_id = models.IntegerField()
    firstname = models.CharField(max_length=32)
    lastname = models.CharField(max_length=32)
    company = models.CharField(max_length=40, default="")
    address_1 = models.CharField(max_length=128)
    address_2 = models.CharField(max_length=128, default="")
    city = models.CharField(max_length=128)
    postcode = models.CharField(max_length=10, default="")
    country_id = models.IntegerField(default=0)
    zone_id = models.IntegerField(default=0)
    custom_field = models.TextField(default="")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_address"


# =============================================================================
# Catalog
# =============================================================================


class Manufacturer(OpenCartModel):
    manufacturer_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=64)
    image = models.CharField(max_length=255, null=True, default=None)
    sort_order = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_manufacturer"


class Product(OpenCartModel):
    product_id = models.AutoField(primary_key=True)
    model = models.CharField(max_length=64)
    sku = models.CharField(max_length=64, default="")
    upc = models.CharField(max_length=12, default="")
    ean = models.CharField(max_length=14, default="")
    jan = models.CharField(max_length=13, default="")
    isbn = models.CharField(max_length=17, default="")
    mpn = models.CharField(max_length=64, default="")
    location = models.CharField(max_length=128, default="")
    quantity = models.IntegerField(default=0)
    stock_status_id = models.IntegerField(default=7)
    image = models.CharField(max_length=255, null=True, default=None)
    manufacturer = _fk(Manufacturer, "manufacturer_id", null=True, default=0)
    shipping = models.BooleanField(default=True)
    price = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    points = models.IntegerField(default=0)
    tax_class_id = models.IntegerField(default=9)
    date_available = OpenCartDateField(null=True, default=None)
    weight = models.DecimalField(max_digits=15, decimal_places=8, default=0)
    weight_class_id = models.IntegerField(default=1)
    length = models.DecimalField(max_digits=15, decimal_places=8, default=0)
    width = models.DecimalField(max_digits=15, decimal_places=8, default=0)
    height = models.DecimalField(max_digits=15, decimal_places=8, default=0)
    length_class_id = models.IntegerField(default=1)
    subtract = models.BooleanField(default=True)
    minimum = models.IntegerField(default=1)
    sort_order = models.IntegerField(default=0)
    status = models.BooleanField(default=False)
    viewed = models.IntegerField(default=0)
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product"

    def __str__(self):
        return self.model


class ProductDescription(OpenCartModel):
    pk = models.CompositePrimaryKey("product_id", "language_id")
    product = _fk(Product, "product_id", related_name="descriptions")
    language_id = models.IntegerField()
    name = models.CharField(max_length=255)
    description = models.TextField(default="")
    tag = models.TextField(default="")
    meta_title = models.CharField(max_length=255, default="")
    meta_description = models.CharField(max_length=255, default="")
    meta_keyword = models.CharField(max_length=255, default="")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_description"


class ProductSpecial(OpenCartModel):
    product_special_id = models.AutoField(primary_key=True)
    product = _fk(Product, "product_id", related_name="specials")
    customer_group_id = models.IntegerField(default=1)
    priority = models.IntegerField(default=1)
    price = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    date_start = OpenCartDateField(null=True, default=None)
    date_end = OpenCartDateField(null=True, default=None)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_special"


class ProductImage(OpenCartModel):
    product_image_id = models.AutoField(primary_key=True)
    product = _fk(Product, "product_id", related_name="images")
    image = models.CharField(max_length=255, null=True, default=None)
    sort_order = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_image"


class ProductRelated(OpenCartModel):
    pk = models.CompositePrimaryKey("product_id", "related_id")
    product_id = models.IntegerField()
    related_id = models.IntegerField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_related"


class Review(OpenCartModel):
    review_id = models.AutoField(primary_key=True)
    product = _fk(Product, "product_id", related_name="reviews")
    customer_id = models.IntegerField(default=0)
    author = models.CharField(max_length=64)
    text = models.TextField()
    rating = models.IntegerField()
    status = models.BooleanField(default=False)
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_review"


class AttributeGroup(OpenCartModel):
    attribute_group_id = models.AutoField(primary_key=True)
    sort_order = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_attribute_group"


class AttributeGroupDescription(OpenCartModel):
    pk = models.CompositePrimaryKey("attribute_group_id", "language_id")
    attribute_group = _fk(AttributeGroup, "attribute_group_id", related_name="descriptions")
    language_id = models.IntegerField()
    name = models.CharField(max_length=64)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_attribute_group_description"


class Attribute(OpenCartModel):
    attribute_id = models.AutoField(primary_key=True)
    attribute_group = _fk(AttributeGroup, "attribute_group_id", related_name="attributes")
    sort_order = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_attribute"


class AttributeDescription(OpenCartModel):
    pk = models.CompositePrimaryKey("attribute_id", "language_id")
    attribute = _fk(Attribute, "attribute_id", related_name="descriptions")
    language_id = models.IntegerField()
    name = models.CharField(max_length=64)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_attribute_description"


class ProductAttribute(OpenCartModel):
    pk = models.CompositePrimaryKey("product_id", "attribute_id", "language_id")
    product = _fk(Product, "product_id", related_name="product_attributes")
    attribute = _fk(Attribute, "attribute_id", related_name="product_attributes")
    language_id = models.IntegerField()
    text = models.TextField(default="")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_attribute"


class Category(OpenCartModel):
    category_id = models.AutoField(primary_key=True)
    image = models.CharField(max_length=255, null=True, default=None)
    parent_id = models.IntegerField(default=0)
    top = models.BooleanField(default=False)
    column = models.IntegerField(default=1)
    sort_order = models.IntegerField(default=0)
    status = models.BooleanField(default=True)
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_category"


class CategoryDescription(OpenCartModel):
    pk = models.CompositePrimaryKey("category_id", "language_id")
    category = _fk(Category, "category_id", related_name="descriptions")
    language_id = models.IntegerField()
    name = models.CharField(max_length=255)
    description = models.TextField(default="")
    meta_title = models.CharField(max_length=255, default="")
    meta_description = models.CharField(max_length=255, default="")
    meta_keyword = models.CharField(max_length=255, default="")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_category_description"


class CategoryPath(OpenCartModel):
    pk = models.CompositePrimaryKey("category_id", "path_id")
    category_id = models.IntegerField()
    path_id = models.IntegerField()
    level = models.IntegerField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_category_path"


class ProductToCategory(OpenCartModel):
    pk = models.CompositePrimaryKey("product_id", "category_id")
    product = _fk(Product, "product_id", related_name="category_links")
    category = _fk(Category, "category_id", related_name="product_links")

    class Meta(OpenCartModel.Meta):
        db_table = "oc_product_to_category"


# =============================================================================
# Orders
# =============================================================================


class OrderStatus(OpenCartModel):
    pk = models.CompositePrimaryKey("order_status_id", "language_id")
    order_status_id = models.IntegerField()
    language_id = models.IntegerField()
    name = models.CharField(max_length=32)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_order_status"


class Order(OpenCartModel):
    order_id = models.AutoField(primary_key=True)
    invoice_no = models.IntegerField(default=0)
    invoice_prefix = models.CharField(max_length=26, default="")
    store_id = models.IntegerField(default=0)
    store_name = models.CharField(max_length=64, default="")
    store_url = models.CharField(max_length=255, default="")
    customer_id = models.IntegerField(default=0)
    customer_group_id = models.IntegerField(default=0)
    firstname = models.CharField(max_length=32, default="")
    lastname = models.CharField(max_length=32, default="")
    email = models.CharField(max_length=96, default="")
    telephone = models.CharField(max_length=32, default="")
    fax = models.CharField(max_length=32, default="")
    custom_field = models.TextField(default="")
    payment_firstname = models.CharField(max_length=32, default="")
    payment_lastname = models.CharField(max_length=32, default="")
    payment_company = models.CharField(max_length=60, default="")
    payment_address_1 = models.CharField(max_length=128, default="")
    payment_address_2 = models.CharField(max_length=128, default="")
    payment_city = models.CharField(max_length=128, default="")
    payment_postcode = models.CharField(max_length=10, default="")
    payment_country = models.CharField(max_length=128, default="")
    payment_country_id = models.IntegerField(default=0)
    payment_zone = models.CharField(max_length=128, default="")
    payment_zone_id = models.IntegerField(default=0)
    payment_address_format = models.TextField(default="")
    payment_custom_field = models.TextField(default="")
    payment_method = models.CharField(max_length=128, default="")
    payment_code = models.CharField(max_length=128, default="")
    shipping_firstname = models.CharField(max_length=32, default="")
    shipping_lastname = models.CharField(max_length=32, default="")
    shipping_company = models.CharField(max_length=40, default="")
    shipping_address_1 = models.CharField(max_length=128, default="")
    shipping_address_2 = models.CharField(max_length=128, default="")
    shipping_city = models.CharField(max_length=128, default="")
    shipping_postcode = models.CharField(max_length=10, default="")
    shipping_country = models.CharField(max_length=128, default="")
    shipping_country_id = models.IntegerField(default=0)
    shipping_zone = models.CharField(max_length=128, default="")
    shipping_zone_id = models.IntegerField(default=0)
    shipping_address_format = models.TextField(default="")
    shipping_custom_field = models.TextField(default="")
    shipping_method = models.CharField(max_length=128, default="")
    shipping_code = models.CharField(max_length=128, default="")
    comment = models.TextField(default="")
    total = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    order_status_id = models.IntegerField(default=0)
    affiliate_id = models.IntegerField(default=0)
    commission = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    marketing_id = models.IntegerField(default=0)
    tracking = models.CharField(max_length=64, default="")
    language_id = models.IntegerField(default=1)
    currency_id = models.IntegerField(default=1)
    currency_code = models.CharField(max_length=3, default="")
    currency_value = models.DecimalField(max_digits=15, decimal_places=8, default=1)
    ip = models.CharField(max_length=40, default="")
    forwarded_ip = models.CharField(max_length=40, default="")
    user_agent = models.CharField(max_length=255, default="")
    accept_language = models.CharField(max_length=255, default="")
    order_from = models.CharField(max_length=32, default="")
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_order"

    @property
    def customer_name(self):
        return f"{self.firstname} {self.lastname}".strip()


class OrderProduct(OpenCartModel):
    order_product_id = models.AutoField(primary_key=True)
    order = _fk(Order, "order_id", related_name="products")
    product = _fk(Product, "product_id", related_name="order_lines")
    name = models.CharField(max_length=255)
    model = models.CharField(max_length=64)
    quantity = models.IntegerField()
    price = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    total = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    tax = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    reward = models.IntegerField(default=0)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_order_product"


class OrderTotal(OpenCartModel):
    order_total_id = models.AutoField(primary_key=True)
    order = _fk(Order, "order_id", related_name="totals")
    code = models.CharField(max_length=32)
    title = models.CharField(max_length=255)
    value = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    sort_order = models.IntegerField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_order_total"


class OrderHistory(OpenCartModel):
    order_history_id = models.AutoField(primary_key=True)
    order = _fk(Order, "order_id", related_name="histories")
    order_status_id = models.IntegerField()
    notify = models.BooleanField(default=False)
    comment = models.TextField(default="")
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_order_history"


class Return(OpenCartModel):
    return_id = models.AutoField(primary_key=True)
    order_id = models.IntegerField()
    product_id = models.IntegerField()
    customer_id = models.IntegerField()
    firstname = models.CharField(max_length=32)
    lastname = models.CharField(max_length=32)
    email = models.CharField(max_length=96)
    telephone = models.CharField(max_length=32)
    product = models.CharField(max_length=255)
    model = models.CharField(max_length=64)
    quantity = models.IntegerField()
    opened = models.BooleanField(default=False)
    return_reason_id = models.IntegerField(default=1)
    return_action_id = models.IntegerField(default=0)
    return_status_id = models.IntegerField(default=1)
    comment = models.TextField(null=True, default="")
    date_ordered = OpenCartDateField(null=True, default=None)
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_return"


class Coupon(OpenCartModel):
    TYPE_PERCENTAGE = "P"
    TYPE_FIXED = "F"

    coupon_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=128)
    code = models.CharField(max_length=20)
    type = models.CharField(max_length=1)
    discount = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    logged = models.BooleanField(default=False)
    shipping = models.BooleanField(default=False)
    total = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    date_start = OpenCartDateField(null=True, default=None)
    date_end = OpenCartDateField(null=True, default=None)
    uses_total = models.IntegerField(default=0)
    uses_customer = models.CharField(max_length=11, default="0")
    status = models.BooleanField(default=False)
    customer_id = models.IntegerField(default=0)
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_coupon"


class CouponHistory(OpenCartModel):
    coupon_history_id = models.AutoField(primary_key=True)
    coupon = _fk(Coupon, "coupon_id", related_name="histories")
    order_id = models.IntegerField()
    customer_id = models.IntegerField()
    amount = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_coupon_history"


class CartItem(OpenCartModel):
    """A line in the mobile app cart (``oc_cart_mob``)."""

    cart_id = models.AutoField(primary_key=True)
    api_id = models.IntegerField(default=0)
    customer_id = models.IntegerField()
    session_id = models.CharField(max_length=32, default="0")
    product_id = models.IntegerField()
    recurring_id = models.IntegerField(default=0)
    option = models.TextField(default="[]")
    quantity = models.IntegerField()
    date_added = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_cart_mob"


# =============================================================================
# Back office
# =============================================================================


class AdminUser(OpenCartModel):
    user_id = models.AutoField(primary_key=True)
    user_group_id = models.IntegerField(default=1)
    username = models.CharField(max_length=20)
    firstname = models.CharField(max_length=32, default="")
    lastname = models.CharField(max_length=32, default="")
    email = models.CharField(max_length=96, default="")
    ip = models.CharField(max_length=40, default="")
    status = models.BooleanField(default=True)
    date_added = models.DateTimeField(null=True)

    class Meta(OpenCartModel.Meta):
        db_table = "oc_user"


class ApiSession(OpenCartModel):
    api_session_id = models.AutoField(primary_key=True)
    api_id = models.IntegerField()
    session_id = models.CharField(max_length=32)
    ip = models.CharField(max_length=40, default="")
    date_added = models.DateTimeField()
    date_modified = models.DateTimeField()

    class Meta(OpenCartModel.Meta):
        db_table = "oc_api_session"
