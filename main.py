"""
MailBridge server
=================

Run with:
    python main.py

Requires MAILCHIMP_API_KEY, MAILCHIMP_SERVER_PREFIX and MONGODB_URI
(a .env file in the working directory is picked up).
"""

import sys

from mailbridge import create_app
from mailbridge.core import Config, ConfigError


def main():
    try:
        config = Config.from_env()
    except ConfigError as e:
        print(f"[MAILBRIDGE] Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    app = create_app(config)
    print(f"[MAILBRIDGE] Starting on port {config.port}...")
    app.run(host='0.0.0.0', port=config.port, debug=not config.production)


if __name__ == '__main__':
    main()
