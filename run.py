from app import create_app

# Local development server. Migrations run through the flask CLI
# (flask db upgrade) and queued inventory pushes through
# flask inventory-sync.
app = create_app()

if __name__ == '__main__':
    app.run(debug=True, threaded=True)
