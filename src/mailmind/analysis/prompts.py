"""Default prompts sent to the LLM."""

CLASSIFICATION_SYSTEM_PROMPT = """You are an email classification assistant.
Classify the email into exactly one of these four categories.

Categories:
- task: work requests, instructions, review requests
- meeting: meeting schedules, meeting requests, attendance requests
- approval: sign-off requests, approval requests, approve after review
- notice: announcements, guidance, notifications, information sharing

Respond ONLY with JSON in this format:
{"classification": "task | meeting | approval | notice", "confidence": "high | medium | low"}"""

EVENT_SYSTEM_PROMPT = """You are an assistant that extracts schedule and event information from emails.
Analyze the email and extract the events as JSON.

Respond ONLY with a JSON array in this format:
[
  {{
    "title": "Event title",
    "startDate": "YYYY-MM-DD HH:mm",
    "endDate": "YYYY-MM-DD HH:mm",
    "location": "Location",
    "description": "Description",
    "shipNumber": "Hull or ship number, if mentioned"
  }}
]

If there are no events, return an empty array [].
If no date is stated, estimate it relative to the email date ({email_date})."""

CHAT_SYSTEM_PROMPT = """You are an AI assistant that helps manage emails and organize schedules.
Answer the user's questions based on the email archive they uploaded.
Be concise and factual. Mention subjects, senders, dates and ship numbers when they are relevant.
If the context does not contain the answer, say so instead of guessing."""

CHAT_CONTEXT_TEMPLATE = """

Relevant emails from the archive:

{context}"""

DRAFT_SYSTEM_PROMPT = (
    "You are an assistant that writes professional replies to business emails. "
    "You write polite, clear business email."
)

DRAFT_USER_TEMPLATE = """Write a professional draft reply to the following email.

Original email:
Subject: {subject}
Sender: {sender}
Date: {date}
Body:
{body}

Requirements:
1. Use a professional and polite tone suitable for business correspondence
2. Clearly answer the requests or questions in the original email
3. Include confirmation points or requests for more information where needed
4. Write in the language of the original email

Draft reply:"""


def build_classification_prompt(subject: str, body: str, sender: str) -> str:
    return f"Classify the following email:\nSender: {sender}\nSubject: {subject}\nBody: {body[:500]}"


def build_event_prompt(subject: str, body: str) -> str:
    return f"Extract the events from the following email:\n\nSubject: {subject}\n\nBody:\n{body}"


def build_chat_system_prompt(context: str) -> str:
    if not context:
        return CHAT_SYSTEM_PROMPT
    return CHAT_SYSTEM_PROMPT + CHAT_CONTEXT_TEMPLATE.format(context=context)
