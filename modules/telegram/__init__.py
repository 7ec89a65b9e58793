"""
Bot Gateway Module.

Webhook-facing half of the relay. Receives Telegram updates over HTTP,
forwards them to the backend service over the backend link, and delivers
the returned outgoing messages through the Telegram Bot API (aiogram).

Structure:
    modules/telegram/
    ├── __init__.py          # This file
    ├── app.py               # Gateway FastAPI application
    ├── bot.py               # aiogram Bot setup
    ├── webhook.py           # POST /webhook endpoint
    ├── schemas.py           # Telegram Update payload → UpdateRequest
    ├── markup.py            # Reply-markup codec (domain ⇄ Telegram JSON)
    └── services/
        ├── backend_client.py  # Backend link (httpx + circuit breaker)
        └── delivery.py        # Outbound sendMessage / setWebhook

Environment Variables:
    TELEGRAM_BOT_TOKEN: Bot token from BotFather
    TELEGRAM_WEBHOOK_SECRET: Secret for webhook validation
"""

from modules.telegram.bot import create_bot, get_bot

__all__ = [
    "create_bot",
    "get_bot",
]
