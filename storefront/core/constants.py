"""Application-wide constants.

Centralizes keys, defaults and user-facing fallback texts shared by the
cart, checkout and account layers.
"""

# ============== LOCAL STORAGE KEYS ==============
CART_STORAGE_KEY = "cart"
AUTH_TOKEN_STORAGE_KEY = "store_auth_token"

# Redis entries expire after 30 days without writes
STORAGE_TTL_SECONDS = 30 * 24 * 60 * 60

# ============== CATALOG ==============
PLACEHOLDER_IMAGE = "/placeholder.svg?height=400&width=400"
DEFAULT_CATEGORY_NAME = "Sin categoría"
FEATURED_PRODUCTS_LIMIT = 4

# ============== ORDERS ==============
ORDER_MODE_DIRECT = "direct"
ORDER_MODE_QUOTE = "quote"
ORDER_MODES = {ORDER_MODE_DIRECT, ORDER_MODE_QUOTE}

SHIPPING_PICKUP = "pickup"
SHIPPING_DELIVERY = "delivery"
PAYMENT_TRANSFER = "transfer"
PAYMENT_CASH = "cash"

# An order counts as edited by the store after this many seconds
ORDER_MODIFIED_THRESHOLD_SECONDS = 60

# ============== MESSAGES ==============
PRICE_ON_REQUEST = "Precio a consultar"
MSG_ORDER_FAILED = "Error al procesar el pedido"
MSG_LOGIN_FAILED = "Error al iniciar sesión"
MSG_REGISTER_FAILED = "Error al crear la cuenta"
MSG_PROFILE_FAILED = "Error al actualizar perfil"
MSG_ORDER_NOT_FOUND = "Pedido no encontrado"
MSG_ORDERS_DISABLED = "La tienda no está recibiendo pedidos"
MSG_REQUIRED_FIELD = "Este campo es obligatorio"
MSG_SELECT_SHIPPING = "Seleccioná un método de envío"
MSG_SELECT_PAYMENT = "Seleccioná un método de pago"
MSG_EMPTY_CART = "Tu carrito está vacío"
MSG_ALREADY_SUBMITTING = "Tu pedido se está enviando"
DEFAULT_WHATSAPP_MESSAGE = "Hola! Me gustaría hacer una consulta."
