"""Adapters to the outside world: report files, the dotnet CLI and git."""
