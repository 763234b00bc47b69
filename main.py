from dotenv import load_dotenv
load_dotenv()

from config.config import Config
from API import create_flask_app

config = Config.from_env()
app = create_flask_app(config)

if __name__ == "__main__":
    app.run(debug=not config.is_production, host="0.0.0.0", port=config.PORT, use_reloader=False)
