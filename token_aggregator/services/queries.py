"""GraphQL documents sent to the Bitquery v1 endpoint."""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# 30-day aggregate: metadata, first transfer block, price inputs and minted supply
TOKEN_DATA_QUERY = """
query ($network: EthereumNetwork!, $token: String!, $from: ISO8601DateTime, $till: ISO8601DateTime) {
  ethereum(network: $network) {
    transfers(
      currency: {is: $token}
      date: {since: $from, till: $till}
    ) {
      currency {
        name
        symbol
        decimals
      }
      amount
      count
      volumeUSD: amount(calculate: sum, in: USD)
      firstTransaction: minimum(of: block)
      transactions: count
    }
    supply: transfers(
      currency: {is: $token}
      sender: {is: "%s"}
    ) {
      totalSupply: amount
    }
    dexTrades(
      baseCurrency: {is: $token}
      date: {since: $from, till: $till}
    ) {
      tradeAmount(in: USD)
      baseAmount
      lastPrice: maximum(of: block, get: quote_price)
      liquidity: maximum(of: quote_price, get: quote_price)
    }
  }
}
""" % ZERO_ADDRESS

# Per-window DEX volume and trade count
TIME_BASED_METRICS_QUERY = """
query ($network: EthereumNetwork!, $token: String!, $from: ISO8601DateTime) {
  ethereum(network: $network) {
    dexTrades(
      baseCurrency: {is: $token}
      time: {since: $from}
    ) {
      volumeUSD: tradeAmount(in: USD)
      transactions: count
    }
  }
}
"""
