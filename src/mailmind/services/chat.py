"""Retrieval-augmented chat, reply drafting and keyword search answers."""

import logging
from dataclasses import dataclass

from ..analysis.drafting import ReplyDrafter
from ..analysis.llm import LLMClient
from ..analysis.prompts import build_chat_system_prompt
from ..exceptions import ConversationNotFoundError, EmailNotFoundError
from ..search.keyword import SearchFilters, SearchResult
from ..search.rag import (
    KEYWORD_TOP_K,
    VECTOR_TOP_K,
    assemble_context,
    format_context,
    select_keyword_hits,
    select_vector_hits,
)
from ..storage.models import Email
from ..storage.repository import EmailStore

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50
SUMMARY_RESULTS = 10


@dataclass
class ChatReply:
    response: str
    conversation_id: int


@dataclass
class SearchAnswer:
    """Keyword search hits with a short textual summary."""

    answer: str
    citations: list[SearchResult]
    top_k: int

    @property
    def hits_count(self) -> int:
        return len(self.citations)


def summarize_results(query: str, results: list[SearchResult]) -> str:
    """List the top subjects with their score and id."""
    lines = "\n".join(
        f"- {r.subject} (score={r.score:.1f}, ID={r.mail_id})" for r in results[:SUMMARY_RESULTS]
    )
    return f"Query: {query}\n\nTop results:\n{lines or '- (no results)'}"


class ChatService:
    """Answer questions about the archive using retrieved email context."""

    def __init__(self, store: EmailStore, llm: LLMClient):
        self._store = store
        self._llm = llm

    def build_context(self, message: str) -> str:
        """Collect vector and keyword hits for a message into one context block.

        Vector search only runs when chunks have been stored and the message
        can be embedded.
        """
        vector_hits = []
        if self._store.count_chunks() > 0:
            query_embedding = self._llm.embed(message)
            if query_embedding:
                vector_hits = select_vector_hits(
                    self._store.search_chunks(query_embedding, VECTOR_TOP_K)
                )

        keyword_hits = select_keyword_hits(self._store.search_emails(message, KEYWORD_TOP_K))

        items = assemble_context(vector_hits, keyword_hits)
        logger.debug(
            f"Context: {len(vector_hits)} vector hits, {len(keyword_hits)} keyword hits, "
            f"{len(items)} items"
        )
        return format_context(items)

    def chat(self, message: str, conversation_id: int | None = None) -> ChatReply:
        """Answer a message within a conversation.

        A new conversation, titled with the start of the message, is created
        when no id is given. The full history is sent to the LLM after a
        system prompt carrying the retrieved context.

        Args:
            message: User message.
            conversation_id: Existing conversation to continue.

        Returns:
            The answer and the conversation id.

        Raises:
            ConversationNotFoundError: If the conversation does not exist.
            LLMUnavailableError: If the LLM cannot be reached.
        """
        if conversation_id is None:
            conversation_id = self._store.create_conversation(message[:TITLE_LENGTH]).id
        elif self._store.get_conversation(conversation_id) is None:
            raise ConversationNotFoundError(conversation_id)

        self._store.add_message(conversation_id, "user", message)

        context = self.build_context(message)
        history = [
            {"role": m.role, "content": m.content}
            for m in self._store.get_messages(conversation_id)
        ]

        answer = self._llm.chat(
            [{"role": "system", "content": build_chat_system_prompt(context)}, *history]
        )

        self._store.add_message(conversation_id, "assistant", answer)
        return ChatReply(response=answer, conversation_id=conversation_id)

    def draft_reply(self, email_id: int) -> tuple[Email, str]:
        """Draft a reply to a stored email.

        Raises:
            EmailNotFoundError: If the email does not exist.
        """
        email = self._store.get_email(email_id)
        if email is None:
            raise EmailNotFoundError(email_id)
        return email, ReplyDrafter(self._llm).draft(email)

    def search(
        self,
        message: str,
        top_k: int = 10,
        filters: SearchFilters | None = None,
    ) -> SearchAnswer:
        query = (message or "").strip()
        citations = self._store.search_emails(query, top_k, filters)
        return SearchAnswer(answer=summarize_results(message, citations), citations=citations, top_k=top_k)
