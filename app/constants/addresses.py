"""Length limits for counterparty addresses."""

# Stored, normalized phone numbers (users, contacts, conversations).
ADDRESS_MAX_LENGTH = 32

# Raw request input may still carry a carrier prefix and spacing.
RAW_ADDRESS_MAX_LENGTH = 64
