"""Contact synchronization between forms, subscriptions and Omnisend."""
