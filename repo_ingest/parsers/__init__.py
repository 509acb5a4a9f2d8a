"""Text splitting for ingestion."""

from .text_splitter import RecursiveTextSplitter

__all__ = ['RecursiveTextSplitter']
