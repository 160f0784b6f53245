from crm.models.customer import Customer
from crm.models.address import Address
from crm.models.order import Order
from crm.models.payment import Payment
