# import all models for Alembic
from salesync.db.models.store import Store
from salesync.db.models.product import Product
from salesync.db.models.sale_line import SaleLine
from salesync.db.models.sales import DailySale, MonthlySale, YearlySale
