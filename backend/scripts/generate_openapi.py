"""Print the OpenAPI schema of the FastAPI app as JSON.

Run from the ``backend`` directory: ``python -m scripts.generate_openapi > openapi.json``.
"""

import json

from app.main import app

if __name__ == "__main__":
    print(json.dumps(app.openapi()))
