#!/usr/bin/env python3
"""
Main execution module for the Firestore to Supabase migration tool
"""

from firestore_migrator.cli.commands import main

if __name__ == "__main__":
    main()
