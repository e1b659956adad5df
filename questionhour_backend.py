import os

from questionhour import create_app

app = create_app()

if __name__ == '__main__':
    # Run the application
    app.run(
        host=os.environ.get('HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', 3001)),
        debug=app.config.get('DEBUG', False)
    )
