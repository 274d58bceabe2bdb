"""
Entry point for the airstats API server.

Usage:
    python run_api.py                    # Development (auto-reload)
    python run_api.py --production       # Production mode

Or directly with uvicorn:
    uvicorn airstats.api:create_app --factory --reload --port 3000
"""

import argparse
import logging
import os

from dotenv import load_dotenv


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description='airstats API Server')
    parser.add_argument('--port', type=int, default=int(os.environ.get('PORT', 3000)),
                        help='Port to listen on (default: 3000)')
    parser.add_argument('--host', default='0.0.0.0', help='Host to bind to (default: 0.0.0.0)')
    parser.add_argument('--production', action='store_true', help='Run in production mode')
    parser.add_argument('--workers', type=int, default=1, help='Number of workers (production)')
    args = parser.parse_args()

    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    import uvicorn

    if args.production:
        uvicorn.run(
            "airstats.api:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            workers=args.workers,
        )
    else:
        uvicorn.run(
            "airstats.api:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=True,
        )


if __name__ == '__main__':
    main()
