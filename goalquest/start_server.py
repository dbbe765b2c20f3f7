#!/usr/bin/env python3
"""
GoalQuest API startup wrapper.

    python -m goalquest.start_server
    HOST=127.0.0.1 PORT=9000 python -m goalquest.start_server
"""
import os
import sys


def main():
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print("[GoalQuest] Starting gamification API")
    print(f"[GoalQuest] Server: http://{host}:{port}")
    print("[GoalQuest] Press CTRL+C to stop")
    print()

    try:
        uvicorn.run(
            "goalquest.main:app",
            host=host,
            port=port,
            reload=False,
            log_level="info",
            access_log=True,
        )
    except KeyboardInterrupt:
        print("\n[GoalQuest] Shutting down...")
        sys.exit(0)


if __name__ == "__main__":
    main()
