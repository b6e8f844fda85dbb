import os
from dotenv import load_dotenv
load_dotenv()
from coursemarket import create_app

app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'])
