"""
httpdconf Web Interface
Flask-based JSON view of a configuration tree on the local file system.
Run with: HTTPDCONF_ROOT_FILE=/etc/httpd/conf/httpd.conf python webapp.py
Open: http://localhost:5000/api/lines
"""

import os
import sys
from flask import Flask, request, jsonify

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.include_expander import CyclicIncludeError
from core.module_catalog import load_module_listing, modules_from_names
from parsers.apache_parser import ApacheParser, default_server_root

app = Flask(__name__)
app.config.update(
    HTTPDCONF_ROOT_FILE=os.environ.get('HTTPDCONF_ROOT_FILE', ''),
    HTTPDCONF_SERVER_ROOT=os.environ.get('HTTPDCONF_SERVER_ROOT', ''),
    HTTPDCONF_MODULES_FILE=os.environ.get('HTTPDCONF_MODULES_FILE', ''),
    HTTPDCONF_MODULES=os.environ.get('HTTPDCONF_MODULES', ''),  # comma-separated
)


def _flag(name: str, default: bool) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {'1', 'true', 'yes', 'on'}


class SettingsError(ValueError):
    """Raised when the app settings cannot describe a configuration tree."""


def build_parser() -> ApacheParser:
    """Create an ApacheParser from the app settings."""
    root_file = app.config['HTTPDCONF_ROOT_FILE']
    if not root_file:
        raise SettingsError("HTTPDCONF_ROOT_FILE is not configured")
    server_root = app.config['HTTPDCONF_SERVER_ROOT'] or default_server_root(root_file)

    static_modules, shared_modules = [], []
    if app.config['HTTPDCONF_MODULES_FILE']:
        static_modules, shared_modules = load_module_listing(app.config['HTTPDCONF_MODULES_FILE'])
    if app.config['HTTPDCONF_MODULES']:
        shared_modules = shared_modules + modules_from_names(app.config['HTTPDCONF_MODULES'].split(','))

    return ApacheParser(root_file, server_root, static_modules, shared_modules)


@app.errorhandler(FileNotFoundError)
def handle_missing_file(e):
    return jsonify({"error": str(e)}), 404


@app.errorhandler(SettingsError)
def handle_invalid_settings(e):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(ValueError)
@app.errorhandler(OSError)
@app.errorhandler(RuntimeError)
def handle_read_failure(e):
    # Failures while reading the tree
    return jsonify({"error": str(e)}), 500


@app.errorhandler(CyclicIncludeError)
def handle_cyclic_include(e):
    return jsonify({"error": str(e), "chain": e.chain}), 500


@app.route('/api/lines', methods=['GET'])
def get_lines():
    """Return the parsable lines of the tree, or of one file with ?file=."""
    parser = build_parser()
    include_vhosts = _flag('include_vhosts', True)
    file = request.args.get('file')

    if file:
        lines = parser.get_file_parsable_lines(file, include_vhosts)
    else:
        lines = parser.get_configuration_parsable_lines(include_vhosts)

    return jsonify({
        "root": parser.root_conf_file,
        "total": len(lines),
        "active": sum(1 for line in lines if line.active),
        "lines": [line.to_dict() for line in lines],
    })


@app.route('/api/files', methods=['GET'])
def get_files():
    """Return the active configuration files in inclusion order."""
    parser = build_parser()
    if _flag('duplicates', False):
        files = parser.get_active_conf_file_list_with_duplicates()
    else:
        files = parser.get_active_conf_file_list()
    return jsonify({"files": files})


@app.route('/api/defines', methods=['GET'])
def get_defines():
    """Return the Define variables of the tree."""
    parser = build_parser()
    return jsonify({"defines": [{"name": d.name, "value": d.value} for d in parser.get_defines()]})


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("  httpdconf Web Interface")
    print("  Open: http://localhost:5000/api/lines")
    print("=" * 60 + "\n")
    app.run(debug=True, host='127.0.0.1', port=5000)
