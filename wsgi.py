from stepup_auth import create_app

application = create_app()

if __name__ == "__main__":
    # Threaded so a slow password hash never stalls other requests
    application.run(threaded=True)
