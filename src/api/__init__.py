"""API: camada HTTP do gateway.

Responsabilidades:
- Definir endpoints HTTP (sessões, mensagens, webhook, health)
- Validar payloads de entrada (pydantic)
- Delegar para o registry/serviços montados no bootstrap
- Traduzir erros de domínio em respostas HTTP

NÃO PODE conter: regras de sessão, resolução de destinatário, entrega de webhook.
"""
