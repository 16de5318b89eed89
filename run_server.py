import os
import sys
from pathlib import Path

from waitress import serve

ROOT_DIR = Path(__file__).resolve().parent
SRC_DIR = ROOT_DIR / 'src'
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from healthlink import create_app

app = create_app()

if __name__ == '__main__':
    host = os.getenv('HOST', '127.0.0.1')
    port = int(os.getenv('PORT', '5000'))
    threads = int(os.getenv('WAITRESS_THREADS', '8'))
    print(f"HealthLink API starting on http://{host}:{port} (waitress, {threads} threads) ...")
    print("Press Ctrl+C to stop.")
    serve(app, host=host, port=port, threads=threads)
