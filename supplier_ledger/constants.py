# supplier_ledger/constants.py
DATA_DIR = "data"
DB_FILE_NAME = "ledger.db"

# Document-store collections (names match the documents written by the
# original web client, so existing data stays readable).
COLLECTION_SUPPLIERS = "suppliers"
COLLECTION_PRODUCTS = "products"
COLLECTION_PURCHASE_INVOICES = "purchaseInvoices"
COLLECTION_SALE_INVOICES = "saleInvoices"
COLLECTION_PAYMENTS = "payments"

COLLECTIONS = (
    COLLECTION_SUPPLIERS,
    COLLECTION_PRODUCTS,
    COLLECTION_PURCHASE_INVOICES,
    COLLECTION_SALE_INVOICES,
    COLLECTION_PAYMENTS,
)

BACKEND_SQLITE = "sqlite"
BACKEND_FIRESTORE = "firestore"
DEFAULT_BACKEND = BACKEND_SQLITE

DEFAULT_CUSTOMER_NAME = "cash customer"
PURCHASE_INVOICE_PREFIX = "INV"
SALE_INVOICE_PREFIX = "SAL"

CURRENCY_SUFFIX = "IQD"
MONEY_TOLERANCE = 0.005

FETCH_ERROR_MESSAGE = (
    "Failed to connect to the database. Please check your internet connection."
)
