"""Test package for llming-widgets."""
from dotenv import load_dotenv, find_dotenv

# optional: a developer .env may point WIDGET_ASSETS_DIR at a real build
load_dotenv(find_dotenv(usecwd=True))
