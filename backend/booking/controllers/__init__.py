# Controllers package initialization
# Flask blueprints; create_app() registers them
