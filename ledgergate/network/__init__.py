"""Transaction invocation against the ledger network"""
