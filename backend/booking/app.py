import logging
import os

from booking.db.session import create_tables
from booking.main import create_app

logger = logging.getLogger(__name__)

# Create Flask app
app = create_app()

if __name__ == "__main__":
    create_tables()
    logger.info("Database tables created successfully")

    # Use PORT from environment or default to 5000 for local dev
    port = int(os.getenv("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_ENV") != "production")
