import logging
from dataclasses import dataclass, field

import reflex as rx

from llm_evals_viewer.latex import RenderedSegment, render_text
from llm_evals_viewer.reasoning import Conversation, boxed_answer_index, normalize
from llm_evals_viewer.records import EvaluationRecord
from llm_evals_viewer.states.common import get_viewer_app
from llm_evals_viewer.util import format_datetime, safe_render_value, truncate

logger = logging.getLogger(__name__)


@dataclass
class MessageVis:
    message_id: str
    role: str
    role_label: str
    content: str
    is_assistant: bool
    segments: list[RenderedSegment] = field(default_factory=list)


@dataclass
class ConversationVis:
    index: int
    title: str
    boxed_answers: list[str] = field(default_factory=list)
    boxed_answers_short: list[str] = field(default_factory=list)
    messages: list[MessageVis] = field(default_factory=list)


def _approx_tokens(conversation: Conversation) -> int:
    # length of the last message of the last chat, ~4 chars per token
    if not conversation.chats or not conversation.chats[-1].messages:
        return 0
    return round(len(conversation.chats[-1].messages[-1].content) / 4)


def build_conversations_vis(conversations: list[Conversation]) -> list[ConversationVis]:
    answers_by_conv = boxed_answer_index(conversations)
    result: list[ConversationVis] = []
    for conv_idx, conversation in enumerate(conversations):
        messages: list[MessageVis] = []
        for chat_idx, chat in enumerate(conversation.chats):
            for msg_idx, message in enumerate(chat.messages):
                messages.append(
                    MessageVis(
                        message_id=f"{conv_idx}-{chat_idx}-{msg_idx}",
                        role=message.role,
                        role_label=message.role[:1].upper() + message.role[1:],
                        content=message.content,
                        is_assistant=message.is_assistant,
                        segments=render_text(message.content),
                    )
                )
        answers = answers_by_conv.get(conv_idx, [])
        result.append(
            ConversationVis(
                index=conv_idx,
                title=f"Conversation {conv_idx + 1} ({_approx_tokens(conversation)})",
                boxed_answers=answers,
                boxed_answers_short=[truncate(a) for a in answers],
                messages=messages,
            )
        )
    return result


class EvalDetailState(rx.State):
    loading: bool = True
    not_found: bool = False
    error_message: str = ""
    parse_error: str = ""

    uuid_input: str = ""
    record_uuid: str = ""
    run_name: str = ""
    exec_time: str = ""
    runtime: str = ""
    prediction: str = ""
    label: str = ""
    is_correct: bool = False
    extracted_answers: list[str] = []

    conversations: list[ConversationVis] = []
    expanded_convs: list[int] = []
    rendered_messages: list[str] = []

    def _reset_view(self) -> None:
        self.not_found = False
        self.error_message = ""
        self.parse_error = ""
        self.conversations = []
        self.expanded_convs = []
        self.rendered_messages = []
        self.extracted_answers = []

    def _apply_record(self, record: EvaluationRecord) -> None:
        self.record_uuid = record.uuid
        self.uuid_input = record.uuid
        self.run_name = record.run_name
        self.exec_time = format_datetime(record.exec_time)
        self.runtime = f"{record.runtime_s:.2f}"
        self.prediction = "-" if record.prediction is None else str(record.prediction)
        self.label = "-" if record.label is None else str(record.label)
        self.is_correct = record.is_correct
        self.extracted_answers = [safe_render_value(a) for a in record.extracted_answers]

        if record.reasoning:
            normalized = normalize(record.reasoning)
            self.parse_error = normalized.parse_error or ""
            self.conversations = build_conversations_vis(normalized.conversations)

    @rx.event
    async def load_record(self) -> None:
        self.loading = True
        self._reset_view()
        uuid = str(self.router.page.params.get("uuid", "") or "")
        self.uuid_input = uuid
        viewer_app = await get_viewer_app()

        try:
            record = await viewer_app.store.get_record(uuid) if uuid else None
        except Exception as e:
            logger.exception(f"Error fetching evaluation {uuid}")
            self.error_message = f"Error fetching data: {e}"
            self.loading = False
            return

        if record is None:
            self.not_found = True
        else:
            self._apply_record(record)
        self.loading = False

    @rx.event
    def set_uuid_input(self, value: str) -> None:
        self.uuid_input = value

    @rx.event
    def resubmit(self):
        uuid = self.uuid_input.strip()
        if uuid:
            return rx.redirect(f"/llm-evals/{uuid}")

    @rx.event
    def handle_uuid_key(self, key: str):
        if key == "Enter":
            return self.resubmit()

    @rx.event
    def toggle_conversation(self, index: int) -> None:
        if index in self.expanded_convs:
            self.expanded_convs = [i for i in self.expanded_convs if i != index]
        else:
            self.expanded_convs = [*self.expanded_convs, index]

    @rx.event
    def toggle_rendered(self, message_id: str) -> None:
        if message_id in self.rendered_messages:
            self.rendered_messages = [m for m in self.rendered_messages if m != message_id]
        else:
            self.rendered_messages = [*self.rendered_messages, message_id]
