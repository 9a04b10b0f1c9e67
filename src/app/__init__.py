"""App: núcleo do gateway: sessões, eventos, destinatários e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- sessions/: registry de sessões por tenant e pareamento
- events/: classificação e roteamento de eventos da rede
- recipients/: canonicalização de telefones e resolução de destinatários
- use_cases/: envio de mensagens
- infra/: implementações concretas de IO (stores, webhook)
- protocols/: contratos do adaptador da rede e do store
- observability/: correlação e métricas

Padrão: app executa; api adapta; utils apoia.
"""
