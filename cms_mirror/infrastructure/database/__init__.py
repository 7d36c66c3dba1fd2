"""
Configuración de base de datos del API de lectura.

Las tablas del mirror las crea el import; aquí solo vive el engine async
y la dependencia que entrega conexiones.
"""
from cms_mirror.infrastructure.database.session import close_db, engine, get_db
