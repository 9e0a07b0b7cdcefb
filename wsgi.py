"""
WSGI Entry Point
Serve with gunicorn (threading async mode needs a single worker):
    gunicorn -w 1 --threads 100 wsgi:app
"""
import os

from examhall import create_app
from examhall.extensions import socketio

app = create_app()

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))

    # The Werkzeug server is only for local development
    socketio.run(
        app,
        host='0.0.0.0',
        port=port,
        debug=app.debug,
        use_reloader=False,
        allow_unsafe_werkzeug=app.debug,
    )
