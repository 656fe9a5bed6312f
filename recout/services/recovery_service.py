# ==============================================================================
# CLIENTE DE RECUPERACIÓN DE PROYECTOS (servicio LLM externo)
# ==============================================================================
# Envía la descripción libre del usuario al endpoint generateContent de
# Gemini y devuelve el texto markdown tal cual.
#
# Cualquier falla (red, HTTP, respuesta ilegible) se convierte en
# RecoveryServiceError genérico. Sin reintentos ni backoff.
# ==============================================================================

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

GEMINI_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
DEFAULT_MODEL = 'gemini-2.5-flash'
FALLBACK_TEXT = 'Não foi possível gerar o plano. Tente novamente com mais detalhes.'

PROMPT_TEMPLATE = """
Você é um Engenheiro de Software Senior.
O usuário perdeu um código que criou ontem e está descrevendo o que lembra dele.
Sua tarefa é gerar um PLANO TÉCNICO DE RECONSTRUÇÃO em Português (Brasil).

Descrição do usuário: "{description}"

Gere uma resposta estruturada contendo:
1. Resumo Técnico: quais bibliotecas provavelmente foram usadas.
2. Estrutura de Arquivos Sugerida: uma lista de componentes necessários.
3. Pseudo-código ou Código Boilerplate: o esqueleto do componente principal.
4. Dicas: como melhorar essa ideia agora que ele vai refazê-la.

Mantenha o tom empático, profissional e encorajador. Use formatação Markdown para o código.
"""


class RecoveryServiceError(Exception):
    """Falla genérica de conexión con el servicio de recuperación."""
    pass


class RecoveryService:
    """
    Cliente del servicio de recuperación.

    Uso:
        recovery = RecoveryService(api_key=os.environ['GEMINI_API_KEY'])
        markdown = recovery.generate_plan('Era um painel de produção...')
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_prompt(self, description: str) -> str:
        return PROMPT_TEMPLATE.format(description=description.strip())

    def generate_plan(self, description: str) -> str:
        """
        Pide un plan de reconstrucción para la descripción dada.

        Returns:
            Texto markdown devuelto por el servicio (o un texto fijo si
            la respuesta vino vacía)

        Raises:
            RecoveryServiceError: Sin API key o falla de comunicación
        """
        if not self.api_key:
            raise RecoveryServiceError("Servicio de recuperación no configurado")

        payload = {'contents': [{'parts': [{'text': self.build_prompt(description)}]}]}
        try:
            response = self.session.post(
                GEMINI_URL.format(model=self.model),
                params={'key': self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Error al llamar al servicio de recuperación: %s", e)
            raise RecoveryServiceError("Falha de conexão com o serviço de recuperação") from e

        return self._extract_text(data) or FALLBACK_TEXT

    @staticmethod
    def _extract_text(data) -> str:
        try:
            parts = data['candidates'][0]['content']['parts']
        except (KeyError, IndexError, TypeError):
            return ''
        return ''.join(part.get('text', '') for part in parts if isinstance(part, dict))
