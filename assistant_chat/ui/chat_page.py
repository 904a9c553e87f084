"""NiceGUI chat interface for the hosted assistant."""

import os

from nicegui import app, ui

from assistant_chat.ui.session import ChatSession, ChatSubmitError, send_chat_message

CUSTOM_CSS = """
<style>
    :root { --dex-accent: #d5522b; --dex-accent-dark: #b8431f; }

    body { background: #faf7f5; font-family: system-ui, -apple-system, 'Segoe UI', sans-serif; }

    .chat-shell {
        background: #ffffff;
        border: 1px solid #eee4df;
        border-radius: 16px;
        overflow: hidden;
    }

    .chat-header { background: var(--dex-accent); }

    .bubble { padding: 0.75rem 1rem; border-radius: 14px; }
    .bubble-user { background: var(--dex-accent); color: #fff; border-bottom-right-radius: 4px; }
    .bubble-assistant {
        background: #fff;
        color: #222;
        border: 1px solid #eee4df;
        border-bottom-left-radius: 4px;
    }
    .bubble-system { background: #fff7ed; color: #7c2d12; border: 1px dashed #fdba74; }

    .waiting-dot {
        width: 7px; height: 7px;
        border-radius: 9999px;
        background: var(--dex-accent);
        animation: pulse-dot 1.2s infinite ease-in-out;
    }
    .waiting-dot:nth-child(2) { animation-delay: 0.15s; }
    .waiting-dot:nth-child(3) { animation-delay: 0.3s; }
    @keyframes pulse-dot {
        0%, 100% { opacity: 0.3; }
        50% { opacity: 1; }
    }

    .composer { background: #fcfaf9; border: 1px solid #eee4df; border-radius: 14px; }
    .composer:focus-within { border-color: var(--dex-accent); }

    .send-btn { background: var(--dex-accent) !important; }
    .send-btn:hover { background: var(--dex-accent-dark) !important; }
</style>
"""

ROLE_LABELS = {"user": "You", "assistant": "Assistant", "system": "System"}


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession(caller_id=app.storage.browser.get("id"))

    messages_container: ui.column
    input_field: ui.input
    send_btn: ui.button
    clear_btn: ui.button

    def render_message(msg: dict) -> None:
        role = msg["role"]
        if role == "user":
            row_classes, bubble_classes = "justify-end", "max-w-[85%]"
        elif role == "system":
            row_classes, bubble_classes = "justify-start", "w-full"
        else:
            row_classes, bubble_classes = "justify-start", "max-w-[85%]"

        with ui.row().classes(f"w-full {row_classes}"):
            with ui.column().classes(f"{bubble_classes} gap-1 bubble bubble-{role}"):
                with ui.row().classes("w-full justify-between items-center gap-4"):
                    ui.label(ROLE_LABELS.get(role, role)).classes("text-sm font-medium")
                    ui.label(msg["time"]).classes("text-xs opacity-70")
                # Rendered as-is, whitespace preserved
                ui.label(msg["content"]).classes("text-sm leading-relaxed whitespace-pre-wrap")

    def refresh_messages() -> None:
        messages_container.clear()
        clear_btn.set_visibility(bool(session.messages))
        with messages_container:
            if not session.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-2"):
                    ui.label("Welcome to your AI assistant!").classes("text-lg text-gray-400")
                    ui.label("Write a question, doubt or something to do").classes(
                        "text-gray-400"
                    )
            else:
                for msg in session.messages:
                    render_message(msg)

    def render_waiting_indicator() -> ui.row:
        with ui.row().classes("w-full justify-start") as row:
            with ui.element("div").classes("bubble bubble-assistant"):
                with ui.row().classes("items-center gap-2"):
                    with ui.row().classes("gap-1"):
                        for _ in range(3):
                            ui.element("div").classes("waiting-dot")
                    ui.label("Thinking...").classes("text-sm text-gray-500 italic")
        return row

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or session.is_waiting:
            return

        input_field.value = ""
        session.is_waiting = True
        send_btn.disable()

        session.add_message("user", text)
        refresh_messages()
        with messages_container:
            waiting_row = render_waiting_indicator()

        try:
            reply = await send_chat_message(text, caller_id=session.caller_id)
        except ChatSubmitError as e:
            waiting_row.delete()
            session.add_error(str(e))
            ui.notify(str(e), type="negative")
        else:
            waiting_row.delete()
            session.add_message("assistant", reply.get("content", ""), reply.get("id"))
        finally:
            session.is_waiting = False
            send_btn.enable()
            refresh_messages()

    def clear_chat() -> None:
        session.clear()
        refresh_messages()
        ui.notify("Conversation history cleared")

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto chat-shell").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full chat-header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("smart_toy").classes("text-white text-3xl")
                ui.label("Dex Chat").classes("text-lg font-semibold text-white")
            clear_btn = ui.button(icon="delete", on_click=clear_chat).props(
                "flat round color=white"
            )

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            with ui.element("div").classes("flex-grow composer px-3 py-2"):
                input_field = (
                    ui.input(placeholder="Write something...")
                    .props("borderless dense")
                    .classes("w-full")
                    .on("keydown.enter", send_message)
                )
            send_btn = (
                ui.button(icon="send", on_click=send_message)
                .props("round unelevated")
                .classes("send-btn")
            )

    refresh_messages()


def main() -> None:
    ui.run(
        title="Dex Chat",
        port=int(os.getenv("UI_PORT", "8080")),
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "assistant-chat-secret"),
    )


if __name__ == "__main__":
    main()
