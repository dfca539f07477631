import os
import sys

# Put the repository root on sys.path so `cli` and `vaultsync_core` import from a checkout.
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))
