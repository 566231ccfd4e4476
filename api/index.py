from mangum import Mangum
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wallet.api import app

# API Gateway serves the app under /api; strip it here so the shared app keeps no prefix.
handler = Mangum(app, api_gateway_base_path="/api")
