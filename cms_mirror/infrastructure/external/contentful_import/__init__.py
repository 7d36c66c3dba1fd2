"""
Pipeline de import one-way: Contentful -> PostgreSQL.

Está diseñado para ejecutarse como job (CLI / cron), no como parte del
request/response del API de lectura.

Objetivos de diseño:
- Reconstrucción completa: cada import hace DROP + CREATE de todas las tablas.
- Esquema derivado de los content models (una tabla por model).
- Links reducidos al id referenciado; el API de lectura no los expande.
- Una sola conexión y una sola transacción por corrida.
"""
