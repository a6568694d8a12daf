"""Lambda handler for the Uploads API using Mangum."""
from mangum import Mangum

from uploads_api.main import configure_logging, create_app
from uploads_api.settings import get_settings

settings = get_settings()
configure_logging(settings.log_level)

# Create FastAPI app
app = create_app(settings)

# Wrap with Mangum for Lambda compatibility
handler = Mangum(app, lifespan="off")

# Export handler for Lambda runtime
lambda_handler = handler
