import os

os.environ.setdefault("APP_ENVIRONMENT", "test")

pytest_plugins = ["tests.fixtures"]
