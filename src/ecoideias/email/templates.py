"""
Email templates for Eco Ideias.

All templates use inline CSS for maximum email client compatibility.
Each template function returns (subject, html_body, text_body). Values
coming from users are HTML-escaped before interpolation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape

from ecoideias.ideas.constants import IdeaStatus

# Color constants
BG_PAGE = "#f3f4f6"
BG_CARD = "#ffffff"
BG_PANEL = "#f9fafb"
GREEN = "#10b981"
GREEN_DARK = "#059669"
RED = "#ef4444"
AMBER = "#f59e0b"
TEXT_PRIMARY = "#1f2937"
TEXT_SECONDARY = "#4b5563"
TEXT_MUTED = "#6b7280"
BORDER = "#e5e7eb"

APP_NAME = "Eco Ideias"


def status_emoji(status: str) -> str:
    """Emoji shown in the subject and heading for a status."""
    if status == IdeaStatus.APPROVED.value:
        return "✅"
    if status == IdeaStatus.REJECTED.value:
        return "❌"
    return "\U0001f504"


def status_color(status: str) -> str:
    """Accent color for a status."""
    if status == IdeaStatus.APPROVED.value:
        return GREEN
    if status == IdeaStatus.REJECTED.value:
        return RED
    return AMBER


def _base_layout(content: str, title: str) -> str:
    """Wrap content in the base email layout."""
    year = datetime.now(timezone.utc).year
    return f"""\
<!DOCTYPE html>
<html lang="pt-BR">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} - {APP_NAME}</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; background-color: {BG_PAGE};">
    <div style="max-width: 600px; margin: 0 auto; padding: 40px 20px;">
        <div style="background: {BG_CARD}; border-radius: 16px; padding: 40px; box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);">
            <div style="text-align: center; margin-bottom: 32px;">
                <h1 style="color: {GREEN}; margin: 0; font-size: 32px; font-weight: bold;">&#x1F331; {APP_NAME}</h1>
            </div>
            {content}
        </div>
        <div style="text-align: center; margin-top: 24px;">
            <p style="color: #9ca3af; font-size: 12px; margin: 0;">
                &copy; {year} {APP_NAME} - Plataforma de Sustentabilidade
            </p>
        </div>
    </div>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    """Render a green CTA button."""
    return f"""\
<div style="text-align: center; margin: 28px 0;">
    <a href="{escape(url, quote=True)}" target="_blank" style="display: inline-block; padding: 14px 32px; background-color: {GREEN}; color: #ffffff; font-size: 16px; font-weight: 600; text-decoration: none; border-radius: 8px;">
        {label}
    </a>
</div>"""


def _paragraph(text: str) -> str:
    return f'<p style="color: {TEXT_SECONDARY}; font-size: 16px; line-height: 1.5; margin: 0 0 16px 0;">{text}</p>'


def status_update(
    user_name: str,
    idea_title: str,
    old_status: str,
    new_status: str,
    approval_points: int = 100,
) -> tuple[str, str, str]:
    """
    Sent to the idea's author when an administrator changes its status.

    Approvals include a congratulation block; it names the points only when
    some were granted by this evaluation.
    """
    emoji = status_emoji(new_status)
    color = status_color(new_status)
    name_html = escape(user_name)
    title_html = escape(idea_title)
    subject = f"{emoji} Status da Ideia: {idea_title}"

    approved_block = ""
    approved_text = ""
    if new_status == IdeaStatus.APPROVED.value:
        earned_html = earned_text = ""
        if approval_points > 0:
            earned_html = f" e voc&ecirc; ganhou <strong>{approval_points} pontos</strong>"
            earned_text = f" e você ganhou {approval_points} pontos"
        approved_block = f"""\
<div style="background: linear-gradient(135deg, {GREEN} 0%, {GREEN_DARK} 100%); border-radius: 8px; padding: 20px; margin: 24px 0; color: #ffffff;">
    <p style="margin: 0; font-size: 16px; line-height: 1.5;">
        &#x1F389; <strong>Parab&eacute;ns!</strong> Sua ideia foi aprovada{earned_html}!
    </p>
</div>"""
        approved_text = f"\nParabéns! Sua ideia foi aprovada{earned_text}!\n"

    content = f"""\
<h2 style="color: {TEXT_PRIMARY}; margin: 0 0 24px 0; font-size: 24px;">{emoji} Atualiza&ccedil;&atilde;o de Status</h2>
{_paragraph(f"Ol&aacute; <strong>{name_html}</strong>,")}
{_paragraph(f"Sua ideia &quot;<strong>{title_html}</strong>&quot; teve o status atualizado.")}
<div style="background: {BG_PANEL}; border-radius: 8px; padding: 20px; margin: 24px 0;">
    <p style="margin: 0 0 12px 0;"><span style="color: {TEXT_MUTED}; font-size: 14px;">Status Anterior:</span>
        <span style="color: {TEXT_PRIMARY}; font-weight: 600;">{escape(old_status)}</span></p>
    <div style="height: 1px; background: {BORDER}; margin: 12px 0;"></div>
    <p style="margin: 0;"><span style="color: {TEXT_MUTED}; font-size: 14px;">Novo Status:</span>
        <span style="color: {color}; font-weight: 700; font-size: 16px;">{escape(new_status)}</span></p>
</div>
{approved_block}
<div style="margin-top: 32px; padding-top: 24px; border-top: 2px solid {BORDER};">
    <p style="color: {TEXT_MUTED}; font-size: 14px; text-align: center; margin: 0;">Continue contribuindo com ideias sustent&aacute;veis!</p>
</div>"""

    text = (
        f"Olá {user_name},\n\n"
        f'Sua ideia "{idea_title}" teve o status atualizado.\n\n'
        f"Status Anterior: {old_status}\n"
        f"Novo Status: {new_status}\n"
        f"{approved_text}\n"
        "Continue contribuindo com ideias sustentáveis!\n"
    )
    return subject, _base_layout(content, "Atualização de Status"), text


def password_reset(reset_url: str, user_name: str | None = None) -> tuple[str, str, str]:
    """Password reset link requested from the forgot-password page."""
    subject = f"Redefinição de senha - {APP_NAME}"
    greeting = f"Ol&aacute; <strong>{escape(user_name)}</strong>," if user_name else "Ol&aacute;,"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY}; margin: 0 0 24px 0; font-size: 24px;">Redefini&ccedil;&atilde;o de senha</h2>
{_paragraph(greeting)}
{_paragraph("Recebemos uma solicita&ccedil;&atilde;o para redefinir sua senha. Clique no bot&atilde;o abaixo para escolher uma nova senha.")}
{_button(reset_url, "Redefinir senha")}
{_paragraph("Se voc&ecirc; n&atilde;o solicitou a redefini&ccedil;&atilde;o, ignore este email.")}"""
    text = (
        f"Olá{' ' + user_name if user_name else ''},\n\n"
        "Recebemos uma solicitação para redefinir sua senha.\n"
        f"Acesse o link para escolher uma nova senha: {reset_url}\n\n"
        "Se você não solicitou a redefinição, ignore este email.\n"
    )
    return subject, _base_layout(content, "Redefinição de senha"), text


def account_created(user_name: str, login_url: str) -> tuple[str, str, str]:
    """Sent when an administrator creates an account for someone."""
    subject = f"Bem-vindo(a) ao {APP_NAME}!"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY}; margin: 0 0 24px 0; font-size: 24px;">Bem-vindo(a)!</h2>
{_paragraph(f"Ol&aacute; <strong>{escape(user_name)}</strong>,")}
{_paragraph("Uma conta foi criada para voc&ecirc; na plataforma. Entre para enviar suas ideias sustent&aacute;veis.")}
{_button(login_url, "Entrar")}"""
    text = (
        f"Olá {user_name},\n\n"
        "Uma conta foi criada para você na plataforma.\n"
        f"Entre em: {login_url}\n"
    )
    return subject, _base_layout(content, "Bem-vindo(a)"), text
