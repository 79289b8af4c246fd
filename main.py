import argparse

import uvicorn

from cardforge.core.config import settings


def parse_arguments():
    parser = argparse.ArgumentParser(description='Run the cardforge flashcard API.')
    parser.add_argument('--host', default="0.0.0.0", help='Interface to bind')
    parser.add_argument('--port', type=int, default=8000, help='Port to listen on')
    parser.add_argument('--reload', action='store_true', help='Reload on code changes (development only)')
    return parser.parse_args()


def main():
    args = parse_arguments()
    uvicorn.run(
        "cardforge.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
