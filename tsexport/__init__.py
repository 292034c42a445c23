"""Export tagged .NET model declarations as TypeScript type declarations."""

__version__ = "0.1.0"
