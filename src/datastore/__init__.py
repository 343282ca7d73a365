"""REPS datastore — sectioned flat-file snapshots of readings."""
