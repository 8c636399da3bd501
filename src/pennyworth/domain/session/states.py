"""Estado da sessão como união etiquetada por `step`.

Cada variante carrega apenas os slots válidos para o seu passo: um rascunho
só existe nas variantes de revisão, então acessá-lo fora delas é erro de tipo,
não de execução.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pennyworth.domain.models import ChatTurn, EmailDraft
from pennyworth.domain.session.steps import ConversationStep


class _FlowBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class SlotlessState(_FlowBase):
    """Passos sem dados acumulados."""

    step: Literal[
        "initial",
        "waiting_for_intent",
        "chatting",
        "get_recipient",
        "reply_email",
        "set_reminder",
    ] = "initial"


class GetPurposeState(_FlowBase):
    step: Literal["get_purpose"] = "get_purpose"
    recipient: str


class DraftReviewState(_FlowBase):
    """Confirmação/edição: o rascunho é obrigatório."""

    step: Literal[
        "confirm_draft",
        "edit_draft",
        "edit_subject",
        "edit_body",
        "edit_recipient",
    ] = "confirm_draft"
    recipient: str
    purpose: str
    draft: EmailDraft


RestingState = Annotated[
    SlotlessState | GetPurposeState | DraftReviewState,
    Field(discriminator="step"),
]


class DraftingState(_FlowBase):
    """Geração de rascunho em andamento.

    `fallback` é o estado restaurado se a geração falhar.
    """

    step: Literal["drafting"] = "drafting"
    recipient: str
    purpose: str
    fallback: RestingState


FlowState = Annotated[
    SlotlessState | GetPurposeState | DraftingState | DraftReviewState,
    Field(discriminator="step"),
]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Session(BaseModel):
    """Sessão de um canal: posição no fluxo + histórico do chat livre."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    user_id: str
    email: str | None = None
    history: tuple[ChatTurn, ...] = ()
    state: FlowState = Field(default_factory=SlotlessState)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def step(self) -> ConversationStep:
        return ConversationStep(self.state.step)

    def with_state(self, state: SlotlessState | GetPurposeState | DraftingState | DraftReviewState) -> Session:
        return self.model_copy(update={"state": state, "updated_at": _utcnow()})

    def with_turns(self, *turns: ChatTurn) -> Session:
        return self.model_copy(
            update={"history": self.history + turns, "updated_at": _utcnow()}
        )

    def recent_history(self, window: int) -> tuple[ChatTurn, ...]:
        """Últimos `window` turnos (contexto enviado ao modelo)."""
        return self.history[-window:] if window > 0 else ()


def at_step(step: ConversationStep) -> SlotlessState:
    """Atalho para variantes sem slots."""
    return SlotlessState(step=step.value)
