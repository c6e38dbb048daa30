"""lncRNA vs protein-coding RNA classification on top of the imbalance_eval harness."""
