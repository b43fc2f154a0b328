"""User-facing replies for the orders action."""

ACTION_NAME = "SENPI_ORDERS"

AGENT_WALLET_NOT_FOUND = "\nPlease make sure to set up your agent wallet first and try again."
DELEGATE_ACCESS_NOT_FOUND = "\nPlease make sure to set up your agent wallet first and try again."
WALLET_CLIENT_NOT_FOUND = (
    "\nUnable to access Senpi wallet details. "
    "Please ensure your Senpi wallet is properly setup and try again."
)
INSUFFICIENT_ETH_BALANCE = (
    "\nInsufficient ETH balance to complete this transaction. "
    "Please add more ETH to your wallet to cover gas fees."
)
INSUFFICIENT_FUNDS_ERROR = "Wallet has insufficient funds to execute the transaction (transaction amount + fees)"
SWAP_OPERATION_FAILED = "\n⚠️ That wasn't supposed to happen. Hit retry and let's pretend it didn't. \n"

GENERATION_FAILED = "⚠️ Hmm, something didn’t go through. Mind giving it another shot?\n"
UNKNOWN_ORDER_TYPE = "⚠️ Hmm… I couldn't quite catch that. Mind trying again?\n"

# validation
NO_ORDERS_DETECTED = (
    "⚠️ No orders were detected in your request. "
    "Please specify the swap, limit order, or stop loss orders you wish to create."
)
GENERIC_ERROR_DETAILS = "An error occurred while processing your request. Please try again."
MISSING_FIELDS = "⚠️ Your Order request is missing some required details. Please take a quick look and try again!\n"
INVALID_QUANTITY = "⚠️ You'll need to enter an amount greater than 0. Please update your prompt and retry\n"
INVALID_BALANCE = "⚠️ Those percentage settings seem a bit off. Could you take another look and try again?\n"

MISSING_TRIGGER_TYPE = (
    "⚠️ Missing Sell Order trigger condition. "
    "Please specify a trigger type (e.g. percentage or value) and try again.\n"
)
MISSING_TRIGGER_PRICE = "⚠️ Missing Sell Order trigger price. Please specify the trigger price value and try again.\n"
MISSING_BALANCE = (
    "⚠️ Missing Sell Order balance configuration. "
    "Please specify the quantity or percentage to sell and try again.\n"
)
MISSING_BALANCE_TYPE = "⚠️ Missing Sell Order balance type. Please specify FULL, PERCENTAGE, or QUANTITY and try again.\n"
MISSING_BALANCE_VALUE = (
    "⚠️ Missing Sell Order balance value. "
    "Please specify the quantity or percentage value and try again.\n"
)

SL_ABOVE_PRICE = (
    "⚠️ Stop Loss higher than the current price. Did you mean setting up limit order instead ? "
    "If not, please set a lower sell value and try again. \n"
)
LO_SELL_BELOW_PRICE = (
    "⚠️ Limit Sell order price is lower than current price. Did you mean setting up stop loss instead ? "
    "If not, please set a higher sell value and try again. \n"
)
SL_PERCENTAGE_TOO_HIGH = (
    "⚠️ Stop Loss higher than the current price. Did you mean setting up limit order instead? "
    "If not, please set a lower sell value and try again. \n"
)
LO_PERCENTAGE_NEGATIVE = "⚠️ Limit Sell order price is lower than current price. Please set a higher value and try again.\n"
SL_DROP_TOO_LARGE = "⚠️ Stop Loss higher than the current price. Please set a lower value and try again. \n"
LO_INCREASE_NEGATIVE = (
    "⚠️ Limit Sell order price is lower than current price. Did you mean setting up stop loss instead? "
    "If not, please set a higher sell value and try again. \n"
)

# swaps
SWAP_FAILED = "⚠️ Unfortunately, the Swap failed. Please try again. \n"


def invalid_swap_inputs(symbol: str, address: str) -> str:
    return (
        f"⚠️ Please check the swap inputs for the token: {symbol} ({address}). "
        "Ensure all amounts and details are correct, then try again.\n"
    )


def wallet_refill(symbol: str) -> str:
    return f"Looks like your agent wallet needs a refill of {symbol}. Top it up and let's try again! 🚀 \n"


def insufficient_swap_balance(symbol: str, balance: str, required: str, top_up: str) -> str:
    return (
        f"⚠️ Insufficient {symbol} balance. \n"
        f" Current balance: {balance} {symbol} \n"
        f" Required amount: {required} {symbol} \n"
        f" Please top up with {top_up} {symbol} to proceed.\n"
    )


def not_enough_in_bag(symbol: str, balance: str, required: str, top_up: str) -> str:
    return (
        f"&nbsp;\nNot enough {symbol} in your bag!\n"
        f"Current balance: {balance} {symbol}\n"
        f"Required amount: {required} {symbol}\n"
        f"Please top up with {top_up} {symbol} to proceed.\n"
    )


# open orders
ETH_NOT_SUPPORTED = "🛑 Stop-loss and limit orders are not supported for ETH. You can wrap it to WETH and try again.\n"
SELL_ORDER_FAILED = "⚠️ Unfortunately, an error occurred while processing your Sell Order (limit/stop loss). Please try again.\n"
SELL_ORDER_ERROR = "⚠️ Something went wrong while setting up your Sell Order (limit/stop loss). Please try again.\n"


def insufficient_order_balance(symbol: str, label: str) -> str:
    return f"⚠️ Insufficient {symbol} balance for {label} order.\n"


def insufficient_order_quantity(symbol: str, label: str, balance: str, required: str) -> str:
    return (
        f"⚠️ Insufficient {symbol} balance for {label} order. \n&nbsp;\n"
        f"Balance: {balance} {symbol}\n"
        f"Required amount: {required} {symbol}\n"
    )


def trigger_not_calculated(order_type: str) -> str:
    return (
        f"⚠️ Something's off — couldn’t calculate the trigger for your {order_type} order. "
        "Please give it another shot!\n"
    )


def sell_percentage_missing(order_type: str) -> str:
    return (
        f"⚠️ Sell percentage is missing for {order_type} order. "
        "Please make sure to add it to your prompt and try again.\n"
    )


def quantity_not_supported_with_swaps(order_type: str) -> str:
    return (
        f"⚠️ Quantity input is not supported for {order_type} orders with swaps. "
        "Please make sure update your prompt and try again.\n"
    )


def buy_amount_missing(order_type: str) -> str:
    return (
        f"⚠️ Buy amount not specified for {order_type} order. Please make sure to add it "
        "to your prompt as either amount or USD value, and try again.\n"
    )


def buy_price_unavailable(address: str, order_type: str) -> str:
    return (
        f"⚠️ Could not retrieve price for {address}. Unfortunately,  {order_type} "
        "order setup failed. Please try again!\n"
    )


def buy_trigger_not_calculated(address: str, order_type: str) -> str:
    return (
        f"⚠️ Could not calculate trigger price or percentage for {address}. Unfortunately,  "
        f"{order_type} order setup failed. Please try again!\n"
    )


# results
ORDER_CREATION_FAILED = "⚠️ Something went wrong. Please try again. \n"


def preparing_order(mention: str) -> str:
    return f"Preparing your order for {mention}\n"
