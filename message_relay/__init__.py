"""Store-and-forward relay for SMS, MMS and email."""
