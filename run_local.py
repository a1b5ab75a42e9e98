"""
debugging with auto-reload
"""

from livereload import Server
from hairt.main import app

def run():
    server = Server(app.wsgi_app)
    server.watch("hairt/*.py")
    server.watch("etc/*.sql")
    server.serve(port=8000, host="localhost", debug=True)

if __name__ == "__main__":
    run()
