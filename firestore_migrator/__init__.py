#!/usr/bin/env python3
"""
Firestore to Supabase migration tool
"""

__version__ = "0.1.0"

# Import the main classes and functions for easier access
from firestore_migrator.core.config import load_config
from firestore_migrator.core.migrator import FirestoreToSupabaseMigrator
from firestore_migrator.services.sink import WriteSink
from firestore_migrator.services.source import CollectionWalker
from firestore_migrator.services.timestamps import normalize_timestamp
