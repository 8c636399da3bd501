"""Textos enviados ao usuário (persona do mordomo, em inglês).

Mensagens fixas ficam como constantes; as que dependem do nome de tratamento
ou do rascunho são funções puras.
"""

from __future__ import annotations

from pennyworth.domain.models import EmailDraft

RECIPIENT_PROMPT = "📧 Very well. Whom shall I address this email to?"
REMINDER_PROMPT = "⏰ What would you like to be reminded about, and when?"
REPLY_EMAIL_PROMPT = "📨 Please tell me the subject of the email you wish to reply to."
INVALID_ADDRESS = "❌ That doesn’t look like an email address. Could you try again?"
PURPOSE_PROMPT = "📝 And what is the purpose or message you wish to convey?"
DRAFTING_NOTICE = "⏳ Allow me a moment to prepare your draft..."
INLINE_DRAFTING_NOTICE = "⏳ Drafting your message, do give me a moment..."
DISPATCH_NOTICE = "📤 Dispatching your email..."
DRAFT_DISCARDED = "❌ Draft discarded. Should you wish again, you know where to find me."
EDIT_FIELD_PROMPT = "🔧 What would you like to edit? (subject/body/recipient)"
EDIT_FIELD_REPROMPT = "Please specify what to edit: subject, body, or recipient."
CONFIRM_REPROMPT = 'Reply with "send", "edit", or "cancel", kind sir.'
NEW_SUBJECT_PROMPT = "✏️ Please provide the new subject:"
NEW_BODY_PROMPT = "✏️ Please provide the new email body:"
NEW_RECIPIENT_PROMPT = "✏️ Please provide the new recipient email:"
SUBJECT_UPDATED = "✅ Subject updated. Ready to send, edit more, or cancel?"
BODY_UPDATED = "✅ Body updated. Shall I proceed to send?"

DRAFT_FAILED = (
    "🙇 My apologies, I could not compose that draft just now. "
    "Do tell me once more what you wish to convey."
)
DELIVERY_FAILED = (
    "🙇 Regrettably, the email could not be dispatched. Your draft is intact. "
    'Say "send" to try again, "edit" to amend it, or "cancel" to discard it.'
)
NOT_YET_SUPPORTED = (
    "🕰️ I'm afraid that task is not yet within my remit. "
    "Perhaps an email instead? Simply say what you need."
)


def login_prompt(display_name: str, login_url: str) -> str:
    return (
        f"🔗 Kindly connect your Google account, {display_name}.\n{login_url}\n\n"
        'Then simply return and say "Hi", and I shall attend to your digital needs.'
    )


def capability_menu(display_name: str) -> str:
    return (
        f"🎩 At your service, {display_name}.\n\n"
        "I can assist with:\n"
        "- 📧 Writing or replying to an email\n"
        "- ⏰ Setting a reminder\n\n"
        "Just say what you need done, and I shall handle the rest."
    )


def persona_description(display_name: str) -> str:
    return (
        f"🎩 Ah, {display_name}, a pleasure as always.\n\n"
        "I am Alfred Pennyworth, the ever-loyal butler to the Wayne family. "
        "I've dedicated my life to assisting Master Bruce (Batman) and ensuring "
        "that both the manor and mission run smoothly.\n\n"
        "I offer strategic advice, medical support, and the occasional dry wit. "
        "If you require my assistance, I am at your service. 🕰️"
    )


def draft_presentation(draft: EmailDraft) -> str:
    return (
        "📨 Here is your composed message:\n\n"
        f"To: {draft.to}\nSubject: {draft.subject}\n\n{draft.body}\n\n"
        'Shall I proceed? Just say "send", "edit", or "cancel".'
    )


def send_success(display_name: str) -> str:
    return f"✅ Your message has been sent with grace. Anything else, {display_name}?"


def recipient_updated(display_name: str) -> str:
    return f"✅ Recipient updated. All ready, {display_name}."


def chat_failure(honorific: str) -> str:
    return f"🤔 I’m a bit unsure how to proceed. Could you rephrase that, {honorific}?"


def unexpected_failure(honorific: str) -> str:
    return f"🙇 Forgive me, {honorific}, something went amiss on my end. Do try again shortly."


# Enviada pelo WhatsApp após o vínculo da conta Google
WELCOME_MESSAGE = (
    "✅ You're now authenticated and ready to use ALF.RED!\n\n"
    "Try typing:\n• \"Send mail\"\n• \"Set reminder\"\n• \"Reply to email\"\n\n"
    "Welcome aboard! 🎩"
)
