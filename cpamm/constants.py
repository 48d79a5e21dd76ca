"""Protocol constants for the constant-product exchange."""

# Null asset / value of an unset mapping slot
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Swap fee as a fraction of the input: 99/100 of the input is priced, 1% stays
# in the pool and accrues to LP share holders
FEE_NUMERATOR = 99
FEE_DENOMINATOR = 100

# Fixed-point scale for fee-free spot prices
PRICE_SCALE = 10**18

# Display decimals of the native coin and of tokens deployed on the local chain
NATIVE_DECIMALS = 18
