#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Backend API Server for the Library of Private Keys
Maps library locations to private keys and back, and derives the address
shown for each key.
"""
from flask import Flask, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
import os
import traceback

from auto_search import AutoSearch
from explorer import ExplorerError, get_address_balance
from feistel import feistel_encrypt
from key_derivation import KeyOutOfRange, derive_public_key, pubkey_to_p2wpkh
from key_formats import (
    interpret_input,
    is_usable_key,
    key_to_canonical_base64,
    key_to_hex,
    parse_hex_key,
)
from library_codec import (
    InvalidEncoding,
    key_to_location,
    locate_index,
    location_from_params,
    location_to_dict,
    parse_int_field,
    random_location,
)

# Load environment variables from .env file if it exists
load_dotenv()

app = Flask(__name__)
CORS(app)

# Debug mode - set via environment variable
DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'

# Bitcoin network used for address derivation and balance lookups
NETWORK = os.environ.get('NETWORK', 'mainnet')

# Optional Esplora base URL override (self-hosted explorer, proxies)
EXPLORER_URL = os.environ.get('EXPLORER_URL') or None

# Upper bound on attempts a single /api/search request may run
SEARCH_MAX_ATTEMPTS = int(os.environ.get('SEARCH_MAX_ATTEMPTS', '50'))
SEARCH_MAX_WORKERS = 8

ZERO_KEY_MESSAGE = 'Key 0 is not a valid private key. Move to another location.'
OUT_OF_RANGE_MESSAGE = 'Key is not below the secp256k1 curve order and has no public key.'

# ============================================================================
# RESPONSE BUILDERS
# ============================================================================

def describe_key(key: int) -> dict:
    """
    Everything the interface shows for one key: encodings, location and,
    for usable keys, public key and address.
    """
    info = {
        'key': '0x' + key_to_hex(key),
        'key_decimal': str(key),
        'canonical_base64': key_to_canonical_base64(key),
        'location': location_to_dict(key_to_location(key)),
        'usable': is_usable_key(key),
        'network': NETWORK,
        'public_key': None,
        'address': None,
    }
    if not info['usable']:
        info['message'] = ZERO_KEY_MESSAGE
        return info
    try:
        pubkey = derive_public_key(key)
    except KeyOutOfRange:
        info['usable'] = False
        info['message'] = OUT_OF_RANGE_MESSAGE
        return info
    info['public_key'] = pubkey.hex()
    info['address'] = pubkey_to_p2wpkh(pubkey, NETWORK)
    return info


def describe_location(location) -> dict:
    index, overflows = locate_index(*location)
    info = describe_key(feistel_encrypt(index))
    # Echo the requested location; the canonical inverse may differ when it wraps
    info['requested'] = location_to_dict(location)
    info['index'] = str(index)
    info['overflow'] = overflows
    return info


def _interpretation_entry(key, location, canonical=None):
    if key is None:
        return None
    entry = {
        'key': '0x' + key_to_hex(key),
        'canonical_base64': canonical or key_to_canonical_base64(key),
        'location': location_to_dict(location),
        'usable': is_usable_key(key),
    }
    return entry


def _parse_int_field(data, name, default):
    return parse_int_field(name, data.get(name, default))

# ============================================================================
# ROUTES
# ============================================================================

@app.route('/api/location', methods=['GET', 'POST'])
def location_key():
    """
    Key for a library location.

    GET reads the location from the query string (shareable URLs), POST from
    a JSON body:
        {
            "hex": "abc",
            "wall": 1,
            "shelf": 2,
            "volume": 3,
            "page": 4
        }
    """
    try:
        if request.method == 'POST':
            data = request.get_json(silent=True)
            if not data:
                return jsonify({'error': 'No JSON data provided'}), 400
            if not isinstance(data, dict):
                return jsonify({'error': 'JSON body must be an object'}), 400
        else:
            data = request.args

        try:
            location = location_from_params(data)
        except InvalidEncoding as e:
            return jsonify({'error': str(e)}), 400

        if DEBUG_MODE:
            print(f"DEBUG: Location lookup {tuple(location)}")

        return jsonify(describe_location(location))

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/key', methods=['POST'])
def key_location():
    """
    Location of a private key.

    Request body:
        {
            "key": "0x..."
        }
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400

        key_text = str(data.get('key', '')).strip()
        if not key_text:
            return jsonify({'error': 'No key provided'}), 400

        try:
            key = parse_hex_key(key_text)
        except InvalidEncoding as e:
            return jsonify({'error': str(e)}), 400

        if DEBUG_MODE:
            print(f"DEBUG: Key lookup {key_to_hex(key)}")

        return jsonify(describe_key(key))

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/interpret', methods=['POST'])
def interpret():
    """
    Interpret free-form search input as brainwallet phrase, base64 key and hex key.

    Request body:
        {
            "input": "satoshi"
        }
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400

        text = data.get('input', '')
        if not isinstance(text, str) or not text:
            return jsonify({'error': 'No input provided'}), 400

        result = interpret_input(text)
        return jsonify({
            'input': result.input,
            'brainwallet': _interpretation_entry(result.brainwallet_key, result.brainwallet_location),
            'base64': _interpretation_entry(result.base64_key, result.base64_location, result.base64_canonical),
            'hex': _interpretation_entry(result.hex_key, result.hex_location),
            'warning': 'Never use brainwallets for real funds!',
        })

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/random', methods=['GET'])
def random_key():
    """A random location and its key"""
    try:
        return jsonify(describe_location(random_location()))
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/balance/<address>', methods=['GET'])
def balance(address):
    """Balance of an address via the block explorer, in satoshis"""
    try:
        sats = get_address_balance(address, NETWORK, base_url=EXPLORER_URL)
        return jsonify({'address': address, 'network': NETWORK, 'balance': sats})
    except ExplorerError as e:
        print(f"⚠️  {e}")
        return jsonify({'error': str(e)}), 502
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/search', methods=['POST'])
def search():
    """
    Bounded auto-search over random locations.

    Request body (all optional):
        {
            "max_attempts": 20,
            "workers": 4
        }
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400
        try:
            max_attempts = _parse_int_field(data, 'max_attempts', SEARCH_MAX_ATTEMPTS)
            workers = _parse_int_field(data, 'workers', 4)
        except InvalidEncoding as e:
            return jsonify({'error': str(e)}), 400

        max_attempts = max(0, min(max_attempts, SEARCH_MAX_ATTEMPTS))
        workers = max(1, min(workers, SEARCH_MAX_WORKERS))

        def lookup(address):
            return get_address_balance(address, NETWORK, base_url=EXPLORER_URL)

        searcher = AutoSearch(lookup, workers=workers, max_attempts=max_attempts,
                              network=NETWORK, verbose=DEBUG_MODE)
        hits = searcher.run()

        return jsonify({
            'attempts': searcher.attempts,
            'errors': searcher.errors,
            'hits': [
                {
                    'location': location_to_dict(hit.location),
                    'key': '0x' + hit.key,
                    'address': hit.address,
                    'balance': hit.balance,
                }
                for hit in hits
            ],
        })

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api', methods=['GET'])
def api_info():
    """API information endpoint"""
    return jsonify({
        'service': 'library-of-private-keys-api',
        'status': 'running',
        'network': NETWORK,
        'endpoints': {
            'location': '/api/location (GET, POST)',
            'key': '/api/key (POST)',
            'interpret': '/api/interpret (POST)',
            'random': '/api/random (GET)',
            'balance': '/api/balance/<address> (GET)',
            'search': '/api/search (POST)',
            'health': '/api/health (GET)'
        }
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'library-of-private-keys-api'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5001))
    host = os.environ.get('HOST', '0.0.0.0')

    print(f"Starting Library of Private Keys API on {host}:{port}")
    print(f"Debug mode: {DEBUG_MODE}")
    print(f"Network: {NETWORK}")
    print(f"API endpoint: http://{host}:{port}/api/location")

    app.run(host=host, port=port, debug=DEBUG_MODE)
