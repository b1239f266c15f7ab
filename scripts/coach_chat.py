#!/usr/bin/env python3
import argparse
import asyncio
from typing import Optional

from app.core.config import settings
from app.core.logging import configure_logging
from app.models.chat import ChatMessage, QuickReply
from app.models.enums import ChatRole, SessionType
from app.schemas.coach import UserContext
from app.services.chat_store import ChatStore
from app.services.coach_client import CoachProxyClient

HELP_TEXT = 'Commands: /replies, /crisis, /exit, /end, /quit. Type a number to pick a quick reply.'


def _format_message(message: ChatMessage, crisis_mode: bool) -> str:
    speaker = 'you' if message.role == ChatRole.USER else 'coach'
    marker = '!' if crisis_mode and message.role == ChatRole.ASSISTANT else ' '
    return f"{marker}[{speaker}] {message.content}"


def _format_replies(replies: list[QuickReply]) -> str:
    if not replies:
        return '(no quick replies)'
    return '  '.join(f"{index}) {reply.text}" for index, reply in enumerate(replies, start=1))


def _pick_reply(raw: str, replies: list[QuickReply]) -> Optional[QuickReply]:
    if not raw.isdigit():
        return None
    index = int(raw) - 1
    if 0 <= index < len(replies):
        return replies[index]
    return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Chat with the quit coach through the proxy endpoint.')
    parser.add_argument('--url', default=settings.COACH_PROXY_URL, help='Coach proxy endpoint')
    parser.add_argument('--token', required=True, help='Access token of the signed-in user')
    parser.add_argument('--user-id', required=True, help='User id the token was issued to')
    parser.add_argument(
        '--session-type',
        choices=[item.value for item in SessionType],
        default=SessionType.COACHING.value,
    )
    parser.add_argument('--quit-date')
    parser.add_argument('--motivation')
    parser.add_argument('--days-since-quit', type=int)
    parser.add_argument('--no-launch', action='store_true', help='Skip the launch greeting')
    parser.add_argument('--log-level', default='WARNING')
    return parser


async def _run(args: argparse.Namespace) -> None:
    user_context = UserContext(
        quit_date=args.quit_date,
        motivation=args.motivation,
        days_since_quit=args.days_since_quit,
    )
    async with CoachProxyClient(access_token=args.token, url=args.url) as client:
        store = ChatStore(client, user_id=args.user_id, user_context=user_context)
        printed = 0

        def render(current: ChatStore) -> None:
            nonlocal printed
            messages = current.messages
            for message in messages[printed:]:
                print(_format_message(message, current.is_crisis_mode))
            printed = len(messages)

        store.subscribe(render)
        store.start_new_session(SessionType(args.session_type))
        if not args.no_launch:
            await store.launch()
        print(HELP_TEXT)

        while not store.is_ending:
            raw = (await asyncio.to_thread(input, '> ')).strip()
            if raw in ('/quit', '/q'):
                break
            if raw == '/replies':
                print(_format_replies(store.visible_quick_replies))
                continue
            if raw == '/crisis':
                store.enter_crisis_mode()
                continue
            if raw == '/exit':
                store.exit_crisis_mode()
                continue
            if raw == '/end':
                store.end_session()
                printed = 0
                store.start_new_session(SessionType(args.session_type))
                if not args.no_launch:
                    await store.launch()
                continue
            reply = _pick_reply(raw, store.visible_quick_replies)
            if reply is not None:
                await store.select_quick_reply(reply)
            else:
                await store.send_message(raw)


def main() -> None:
    args = _build_parser().parse_args()
    configure_logging(args.log_level)
    try:
        asyncio.run(_run(args))
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == '__main__':
    main()
