PRODUCTS_PATH = "/products"
SEARCH_PATH = "/products/search"
CART_PATH = "/cart"
LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"

INCREMENT = "increment"
DECREMENT = "decrement"
DIRECTIONS = (INCREMENT, DECREMENT)

# сообщения для пользователя
MSG_GENERIC = "Something went wrong. Check the backend console for more details"
MSG_BACKEND = "Something went wrong. Check with backend"
MSG_CART_FETCH = (
    "Could not fetch cart details. Check that the backend is running, "
    "reachable and returns valid JSON."
)
MSG_LOGIN_REQUIRED = "Login to add an item to the Cart"
MSG_ALREADY_IN_CART = "Item already in cart. Use the cart sidebar to update quantity or remove item."
MSG_PRODUCT_NOT_FOUND = "Product doesn't exist"
MSG_USERNAME_TAKEN = "Username is already taken"
MSG_REGISTERED = "Registered Successfully"
