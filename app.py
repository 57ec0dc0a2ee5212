"""
Voice Notes - dictate into the browser, transcribe with Whisper, save via webhook.
Recently edited Notion page titles bias the transcription toward known names.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS

from config import log_event, groq_client, NOTION_API_KEY, NOTE_WEBHOOK_URL
from routes import api

app = Flask(__name__, template_folder="templates")
CORS(app)
app.register_blueprint(api)


def main():
    port = int(os.getenv("PORT", 5050))
    log_event(
        logging.INFO,
        "server_startup",
        groq_ready=bool(groq_client),
        notion_ready=bool(NOTION_API_KEY),
        webhook_ready=bool(NOTE_WEBHOOK_URL),
        port=port,
    )

    print(f"""
    ╔═══════════════════════════════════════════════════╗
    ║            🎙️  VOICE NOTES - Diktat               ║
    ╠═══════════════════════════════════════════════════╣
    ║   Groq (Whisper):  {'✅ Ready' if groq_client else '❌ No API Key'}                    ║
    ║   Notion:          {'✅ Ready' if NOTION_API_KEY else '❌ No API Key'}                    ║
    ║   Webhook:         {'✅ Ready' if NOTE_WEBHOOK_URL else '❌ Not set'}                       ║
    ╠═══════════════════════════════════════════════════╣
    ║   Server: http://localhost:{port}                    ║
    ╚═══════════════════════════════════════════════════╝
    """)
    app.run(debug=True, port=port, threaded=True)


if __name__ == '__main__':
    main()
