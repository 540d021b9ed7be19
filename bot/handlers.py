from __future__ import annotations

import logging

from telegram import Update
from telegram.error import Forbidden
from telegram.ext import (
    Application, CommandHandler, MessageHandler,
    ContextTypes, filters,
)

from config import COMMAND_PREFIX, PRIVATE_FLAG
from services.commands import Reply, answer

log = logging.getLogger(__name__)

P = COMMAND_PREFIX

HELP_TEXT = (
    "Commands:\n"
    "• !SYM — info about a coin (several at once: !BTC !ETH)\n"
    f"• {P}top [N] — top N coins by market cap (default 5)\n"
    f"• {P}price COIN [CURRENCY] [e:EXCHANGE] [N.days] — price on an exchange or the global average\n"
    f"• {P}global — total market cap\n"
    f"• {P}cal COIN — upcoming events for a coin\n"
    f"Add {PRIVATE_FLAG} to any command to get the answer in a private chat."
)

PRIVATE_BLOCKED = "I can't message you privately, open a chat with me and press Start first."


# ------------ Доставка ответа ------------
async def deliver(update: Update, context: ContextTypes.DEFAULT_TYPE, reply: Reply) -> None:
    """Public replies go to the chat, private ones to the sender's DM."""
    if not reply.private or not update.effective_user:
        await update.message.reply_text(reply.text)
        return
    try:
        await context.bot.send_message(chat_id=update.effective_user.id, text=reply.text)
    except Forbidden as e:
        # пользователь ещё не открывал чат с ботом
        log.info("private reply to %s refused: %s", update.effective_user.id, e)
        await update.message.reply_text(PRIVATE_BLOCKED)


# ------------ Команды ------------
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text("Hi! I answer crypto price questions.\n\n" + HELP_TEXT)


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT)


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message or not update.message.text:
        return
    for reply in await answer(update.message.text):
        await deliver(update, context, reply)


def register_handlers(app: Application) -> None:
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, on_text))
