import json, hashlib, re
from pathlib import Path
from datetime import datetime

def save_json(path, obj):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(obj, f, indent=2)

def file_digest(path, chunk=65536):
    h = hashlib.sha256()
    with open(path, 'rb') as f:
        for block in iter(lambda: f.read(chunk), b''):
            h.update(block)
    return h.hexdigest()

def sanitize_filename(name):
    # path separators and whitespace only; everything else is kept verbatim
    return re.sub(r'[\s/\\]', '_', name)

def run_timestamp(when=None):
    return (when or datetime.now()).strftime('%Y%m%d_%H%M%S')

def now_text():
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')
