import os

# Provide the internal key so main.py can be imported; tests patch it per case.
os.environ.setdefault("INTERNAL_API_KEY", "test_secret_key")

# Keep the host's pricing overrides out of the app under test.
for _name in [name for name in os.environ if name.startswith("PRICING_")]:
    os.environ.pop(_name)
