"""Shared test setup."""

import os

# main builds its session at import time; keep it off disk and off the network
os.environ["OFFER_STORE_PATH"] = ""
os.environ["OFFER_OBJECT_STORAGE"] = "none"
