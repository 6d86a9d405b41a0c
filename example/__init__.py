"""Aplicação de exemplo do AdminKit."""
