"""Relay da tabela de alarmes do monitoramento (fm_alarminfo) para o Alertmanager.

Este pacote contém:
- constants: variáveis de ambiente e tabela de nomes dos alarmes
- exceptions: erros de consulta, rejeição por alarme e envio
- models: registros de alarme/regra e a notificação gerada
- parsing: leitura do campo fm_extrainfo por código de alarme
- compiler: labels e descrição de cada alarme
- resolver: junção alarme -> regra por rule_id
- sources: consultas ao banco (SQLAlchemy)
- services: envio ao webhook do Alertmanager
- dispatcher: ciclo de varredura e scheduler
- controller: criação do Flask app e endpoints
"""
