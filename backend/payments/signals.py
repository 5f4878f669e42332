from django.dispatch import Signal

# Sent after the transaction that recorded a payment commits.
# Receivers get ``payment`` and ``order``.
payment_recorded = Signal()
