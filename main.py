"""
AdminKit - Ponto de entrada da aplicação de exemplo.

Execute com:
    python main.py

Ou com uvicorn:
    uvicorn main:app --reload

Configuração:
    Settings em example/settings.py
    Variáveis de ambiente em .env e .env.{ENVIRONMENT}
"""

from example.app import create_example_app
from example.settings import settings

app = create_example_app(settings).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
