"""Transaction query and reversal engine for the ledger admin console."""
