"""Domain policies for the ledger.

Pure rules with no database access. Invoice status follows from amounts and
dates, and a lease term is laid out in installments whose settlement moves the
paid-through date. Maintenance requests follow a small status workflow.
Services apply them.
"""
