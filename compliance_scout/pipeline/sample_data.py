"""Canned documents returned in sample mode, without a browser or LLM."""

from __future__ import annotations

import datetime

from compliance_scout.models import documents

_TERMS_TEMPLATE = """\
TERMS OF SERVICE FOR {url}

Last Updated: {date}

1. ACCEPTANCE OF TERMS
By accessing and using this website, you accept and agree to be bound by these terms.

2. USE LICENCE
Permission is granted to temporarily view the materials on this website for personal, non-commercial use only.

3. USER ACCOUNT
If you register for an account, you are responsible for keeping it secure and for all activity that occurs under it.

4. DATA COLLECTION
We may collect personal data such as your email, name, preferences and browsing behaviour to improve and personalise the service.

5. LIMITATION OF LIABILITY
The company is not liable for any special or consequential damages arising from the use of, or inability to use, this website."""

_PRIVACY_TEMPLATE = """\
PRIVACY POLICY FOR {url}

Effective Date: {date}

This policy describes how we collect, use, process and disclose your information when you use our website.

1. INFORMATION WE COLLECT
Personal information you provide directly, such as your name, email address and payment details.

2. HOW WE USE YOUR INFORMATION
To provide, maintain and improve our services, process transactions and send communications.

3. SHARING AND DISCLOSURE
We may share information with vendors who provide services to us, under strict confidentiality agreements.

4. DATA RETENTION
We keep personal information for as long as necessary for the purposes in this policy, unless the law requires longer.

5. YOUR RIGHTS
You may access, correct, update or request deletion of your personal information, object to or restrict its processing, and request portability."""

_COOKIE_TEMPLATE = """\
COOKIE POLICY FOR {url}

Last Updated: {date}

1. WHAT ARE COOKIES
Cookies are small text files placed on your device when you browse websites.

2. HOW WE USE COOKIES
To remember your preferences, compile aggregate data about site traffic and support our marketing partners.

3. TYPES OF COOKIES WE USE
- Essential cookies: necessary for the website to function.
- Preference cookies: remember your settings.
- Analytics cookies: help us understand how visitors use the website.
- Marketing cookies: track visitors across websites to show relevant adverts.

4. CONTROLLING COOKIES
You can delete existing cookies and set most browsers to block new ones, though some preferences may then need to be set manually on each visit."""


def sample_result(url: str, *, today: datetime.date | None = None) -> documents.ScrapingResult:
    """Return fixed terms, privacy and cookie documents for *url*."""
    date = (today or datetime.datetime.now(datetime.UTC).date()).isoformat()
    return documents.ScrapingResult(
        terms_of_service=documents.DocumentResult.found(
            documents.DocumentType.TERMS, _TERMS_TEMPLATE.format(url=url, date=date), url
        ),
        privacy_policy=documents.DocumentResult.found(
            documents.DocumentType.PRIVACY, _PRIVACY_TEMPLATE.format(url=url, date=date), url
        ),
        cookie_policy=documents.DocumentResult.found(
            documents.DocumentType.COOKIE, _COOKIE_TEMPLATE.format(url=url, date=date), url
        ),
    )
